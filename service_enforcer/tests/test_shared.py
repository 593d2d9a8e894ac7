"""
Tests for shared configuration, errors and logging helpers.
"""

import structlog
from structlog.testing import capture_logs

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.config import EnforcerConfig, get_config, IN_CLUSTER_TOKEN_FILE
from shared.errors import (
    EnforcerException, PolicyFormatError, ExternalServiceError, IdentityNotFoundError
)
from shared.logging import add_service_context, configure_logging, get_logger
from service_enforcer.app.context import RequestContext, ServiceAccount, ServiceAccountSlot


class TestConfig:
    """Test cases for enforcer configuration."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ENFORCER_KUBE_API_URL", raising=False)
        config = get_config()
        assert config.service_name == "enforcer"
        assert config.kube_api_url == "https://kubernetes.default.svc"
        assert config.kube_token_file == IN_CLUSTER_TOKEN_FILE
        assert config.kube_verify_tls is True

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("ENFORCER_KUBE_API_URL", "https://api.test:6443")
        monkeypatch.setenv("ENFORCER_IDENTITY_LOOKUP_TIMEOUT", "1.5")
        config = EnforcerConfig()
        assert config.kube_api_url == "https://api.test:6443"
        assert config.identity_lookup_timeout == 1.5

    def test_overrides(self):
        assert get_config(log_level="debug").log_level == "debug"


class TestErrors:
    """Test cases for the error hierarchy."""

    def test_to_dict(self):
        error = PolicyFormatError("bad policy", details={"policy_type": "CustomPolicy"})
        assert isinstance(error, EnforcerException)
        assert error.to_dict() == {
            "code": "POLICY_FORMAT_ERROR",
            "message": "bad policy",
            "details": {"policy_type": "CustomPolicy"},
        }

    def test_external_service_message(self):
        error = ExternalServiceError("kubernetes", "timeout")
        assert str(error) == "kubernetes: timeout"
        assert IdentityNotFoundError().code == "IDENTITY_NOT_FOUND"


class TestLogging:
    """Test cases for logging helpers."""

    def teardown_method(self):
        structlog.reset_defaults()

    def test_service_context(self):
        event = add_service_context(None, "info", {"logger": "enforcer.policy_checker"})
        assert event["service"] == "enforcer"

    def test_service_context_without_component(self):
        assert add_service_context(None, "info", {"logger": "root"}) == {"logger": "root"}

    def test_get_logger_binds_fields(self):
        """Fields passed to get_logger appear on every event."""
        with capture_logs() as logs:
            get_logger("enforcer.test", namespace="secure-ns", user="alice").info("checked")

        assert logs[0]["event"] == "checked"
        assert logs[0]["namespace"] == "secure-ns"
        assert logs[0]["user"] == "alice"

    def test_configure_logging(self):
        """Host-bound context variables are merged into events."""
        configure_logging("enforcer", "debug")

        processors = structlog.get_config()["processors"]
        assert processors[0] is structlog.contextvars.merge_contextvars
        assert add_service_context in processors
        get_logger("enforcer.test").debug("configured", component="test")


class TestRequestContext:
    """Test cases for the request context."""

    def test_parse_service_account_user(self):
        reqc = RequestContext(user_name="system:serviceaccount:secure-ns:deployer")
        assert reqc.parse_service_account_user() == ("secure-ns", "deployer")
        assert RequestContext(user_name="alice").parse_service_account_user() is None
        assert RequestContext(user_name="oidc:alice").parse_service_account_user() is None

    def test_slot_written_once(self):
        slot = ServiceAccountSlot()
        assert slot.is_resolved is False
        assert slot.value is None
        first = ServiceAccount(name="a", namespace="ns")
        second = ServiceAccount(name="b", namespace="ns")

        assert slot.set(first) is first
        assert slot.set(second) is first
        assert slot.get() is first
        assert slot.value is first

    def test_slot_per_context(self):
        a, b = RequestContext(), RequestContext()
        a.service_account.set(ServiceAccount(name="a", namespace="ns"))
        assert b.service_account.is_resolved is False
