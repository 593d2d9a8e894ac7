"""
Unit tests for the Kubernetes service account client.
"""

import pytest
import httpx

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_enforcer.app.identity.client import KubeServiceAccountClient
from shared.config import EnforcerConfig
from shared.errors import ExternalServiceError, IdentityNotFoundError

API_URL = "https://kube.example:6443"


def make_client(handler, **kwargs) -> KubeServiceAccountClient:
    return KubeServiceAccountClient(API_URL, transport=httpx.MockTransport(handler), **kwargs)


class TestKubeServiceAccountClient:
    """Test cases for KubeServiceAccountClient."""

    @pytest.fixture
    def service_account_body(self):
        """Service account as returned by the API server."""
        return {
            "apiVersion": "v1",
            "kind": "ServiceAccount",
            "metadata": {
                "name": "deployer",
                "namespace": "secure-ns",
                "annotations": {"integrityVerified": "true"},
            },
        }

    def test_get_service_account(self, service_account_body):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=service_account_body)

        client = make_client(handler, token="secret-token")
        sa = client.get_service_account("deployer", "secure-ns")

        assert seen["path"] == "/api/v1/namespaces/secure-ns/serviceaccounts/deployer"
        assert seen["auth"] == "Bearer secret-token"
        assert sa.name == "deployer"
        assert sa.namespace == "secure-ns"
        assert sa.annotations == {"integrityVerified": "true"}

    def test_callable_lookup(self, service_account_body):
        service_account_body["metadata"].pop("annotations")
        client = make_client(lambda request: httpx.Response(200, json=service_account_body))

        sa = client("deployer", "secure-ns")
        assert sa.annotations == {}

    def test_token_file(self, tmp_path, service_account_body):
        token_file = tmp_path / "token"
        token_file.write_text("file-token\n")
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=service_account_body)

        make_client(handler, token_file=str(token_file)).get_service_account("deployer", "secure-ns")
        assert seen["auth"] == "Bearer file-token"

    def test_missing_token_file(self, tmp_path):
        client = make_client(
            lambda request: httpx.Response(200, json={}),
            token_file=str(tmp_path / "missing"),
        )
        with pytest.raises(ExternalServiceError):
            client.get_service_account("deployer", "secure-ns")

    def test_not_found(self):
        client = make_client(lambda request: httpx.Response(404, json={"reason": "NotFound"}))
        with pytest.raises(IdentityNotFoundError) as exc_info:
            client.get_service_account("ghost", "secure-ns")
        assert exc_info.value.details == {"name": "ghost", "namespace": "secure-ns"}

    def test_server_error(self):
        client = make_client(lambda request: httpx.Response(500))
        with pytest.raises(ExternalServiceError) as exc_info:
            client.get_service_account("deployer", "secure-ns")
        assert exc_info.value.details == {"status_code": 500}

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ExternalServiceError) as exc_info:
            make_client(handler).get_service_account("deployer", "secure-ns")
        assert exc_info.value.code == "EXTERNAL_SERVICE_ERROR"
        assert exc_info.value.message.startswith("kubernetes:")

    def test_from_config(self):
        config = EnforcerConfig(
            kube_api_url="https://api.cluster:6443/",
            kube_token_file=None,
            kube_ca_file="/etc/ca.crt",
            identity_lookup_timeout=2.5,
        )
        client = KubeServiceAccountClient.from_config(config)

        assert client.api_url == "https://api.cluster:6443"
        assert client.verify == "/etc/ca.crt"
        assert client.timeout == 2.5
        assert client.token_file is None

    def test_from_config_tls_disabled(self):
        config = EnforcerConfig(kube_verify_tls=False, kube_ca_file="/etc/ca.crt")
        assert KubeServiceAccountClient.from_config(config).verify is False
