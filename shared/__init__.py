"""
Shared utilities for the integrity enforcer.

This package aggregates common building blocks consumed by the enforcer
service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- errors: Canonical error types

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
