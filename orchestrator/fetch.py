"""
Certified Call Sources

The network side of the workflow: make one call to a service and return
the raw reply together with the certificate proving it. Nothing returned
here is trusted until the certificate has been verified offline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from statecert.certificate.models import Certificate
from statecert.crypto.hashing import from_hex, to_hex
from statecert.crypto.principal import Principal
from statecert.http.client import HttpClient, HttpError
from statecert.schemas.errors import CertificateDecodeException, FetchException


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchedCall:
    """Unverified result of a certified call."""
    reply: bytes
    certificate: Certificate


@runtime_checkable
class CertificateSource(Protocol):
    """Protocol for anything that can fetch a certified call."""

    def fetch_certified_call(
        self,
        canister_id: Principal,
        method: str,
        arg: bytes,
        *,
        timeout_s: float,
    ) -> FetchedCall:
        """
        Call `method` on `canister_id` and return the reply with its certificate.

        Raises:
            FetchException: If the call cannot be completed
        """
        ...


class HttpCertificateSource:
    """
    Fetches certified calls from an HTTP gateway.

    Contract:
        POST {gateway_url}/api/v2/canister/{canister_id}/certified-call
        request:  {"method": "<name>", "arg": "0x<bytes>"}
        response: {"reply": "0x<bytes>", "certificate": <certificate document>}
    """

    def __init__(
        self,
        gateway_url: str,
        *,
        client: Optional[HttpClient] = None,
        proxy: Optional[str] = None,
    ) -> None:
        self.gateway_url = gateway_url.rstrip("/")
        self.client = client or HttpClient(
            proxy=proxy,
            default_headers={"Accept": "application/json"},
        )

    def endpoint(self, canister_id: Principal) -> str:
        return f"{self.gateway_url}/api/v2/canister/{canister_id}/certified-call"

    def fetch_certified_call(
        self,
        canister_id: Principal,
        method: str,
        arg: bytes,
        *,
        timeout_s: float = 30.0,
    ) -> FetchedCall:
        url = self.endpoint(canister_id)
        logger.info("Calling %s on %s", method, canister_id)

        try:
            response = self.client.post(
                url,
                json={"method": method, "arg": to_hex(arg)},
                timeout=timeout_s,
            )
        except HttpError as e:
            raise FetchException(f"Request to {url} failed: {e}") from e

        if not response.ok:
            raise FetchException(
                f"Gateway returned HTTP {response.status_code}",
                status_code=response.status_code,
                details={"url": url, "body": response.text[:500]},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise FetchException(f"Gateway response is not JSON: {e}") from e
        except RecursionError as e:
            raise FetchException("Gateway response is nested too deeply") from e

        if not isinstance(body, dict) or "certificate" not in body:
            raise FetchException("Gateway response has no certificate", details={"url": url})

        try:
            reply = from_hex(body.get("reply", "0x"))
        except ValueError as e:
            raise FetchException(f"Gateway reply is not hex: {e}") from e

        try:
            certificate = Certificate.from_dict(body["certificate"])
        except CertificateDecodeException as e:
            raise FetchException(f"Gateway returned a malformed certificate: {e.message}") from e

        logger.info("Received reply (%d bytes) with certificate", len(reply))
        return FetchedCall(reply=reply, certificate=certificate)


__all__ = [
    "FetchedCall",
    "CertificateSource",
    "HttpCertificateSource",
]
