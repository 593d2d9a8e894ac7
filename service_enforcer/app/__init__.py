"""
Enforcer Service package for the integrity enforcer.

This package decides how an incoming resource-change request is treated
under the configured policies: enforced (signature required), ignored,
allowed as an internal or rule-exempt change, or permitted through an
ownership/creator exception. It provides:

- app.policy: Policy model, pattern matching, and the policy checker.
- app.context: Request context and the per-request identity cache.
- app.identity: Service account lookup against the Kubernetes API.

Guidelines:
- One PolicyChecker and one RequestContext per request; never share them.
- Evaluation fails closed: anything that cannot be evaluated does not match.
"""
