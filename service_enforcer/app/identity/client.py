"""
Kubernetes service account client for Enforcer Service.
"""

import httpx
from typing import Callable, Optional, Union
from pathlib import Path

from shared.config import EnforcerConfig
from shared.logging import get_logger
from shared.errors import ExternalServiceError, IdentityNotFoundError
from ..context import ServiceAccount

ServiceAccountLookup = Callable[[str, str], ServiceAccount]


class KubeServiceAccountClient:
    """Client for reading service accounts from the Kubernetes API."""

    def __init__(self, api_url: str, token: Optional[str] = None,
                 token_file: Optional[str] = None,
                 verify: Union[bool, str] = True, timeout: float = 5.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.token_file = token_file
        self.verify = verify
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger("enforcer.identity_client")

    @classmethod
    def from_config(cls, config: EnforcerConfig) -> "KubeServiceAccountClient":
        verify: Union[bool, str] = config.kube_verify_tls
        if verify and config.kube_ca_file:
            verify = config.kube_ca_file
        return cls(
            api_url=config.kube_api_url,
            token_file=config.kube_token_file,
            verify=verify,
            timeout=config.identity_lookup_timeout,
        )

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        token = self.token
        if token is None and self.token_file:
            try:
                token = Path(self.token_file).read_text().strip()
            except OSError as e:
                raise ExternalServiceError(
                    "kubernetes",
                    "Service account token unavailable",
                    details={"token_file": self.token_file, "error": str(e)}
                )
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def get_service_account(self, name: str, namespace: str) -> ServiceAccount:
        """Fetch a service account by name and namespace."""
        url = f"{self.api_url}/api/v1/namespaces/{namespace}/serviceaccounts/{name}"

        try:
            with httpx.Client(timeout=self.timeout, verify=self.verify, transport=self.transport) as client:
                response = client.get(url, headers=self._headers())
        except httpx.HTTPError as e:
            self.logger.error("Kubernetes API HTTP error", name=name, namespace=namespace, error=str(e))
            raise ExternalServiceError(
                "kubernetes",
                "Service account lookup failed",
                details={"http_error": str(e)}
            )

        if response.status_code == 404:
            raise IdentityNotFoundError(
                f"Service account {namespace}/{name} not found",
                details={"name": name, "namespace": namespace}
            )
        if response.status_code != 200:
            self.logger.error(
                "Kubernetes API error",
                name=name,
                namespace=namespace,
                status_code=response.status_code
            )
            raise ExternalServiceError(
                "kubernetes",
                f"Unexpected status {response.status_code}",
                details={"status_code": response.status_code}
            )

        metadata = response.json().get("metadata") or {}
        return ServiceAccount(
            name=metadata.get("name", name),
            namespace=metadata.get("namespace", namespace),
            annotations=dict(metadata.get("annotations") or {}),
        )

    def __call__(self, name: str, namespace: str) -> ServiceAccount:
        return self.get_service_account(name, namespace)
