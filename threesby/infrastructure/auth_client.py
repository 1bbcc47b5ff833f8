"""Hosted Auth Client — creates and deletes accounts through the auth service admin API.

Invariants:
    - Implements core.boundary_protocols.AccountProvider
    - Every failure (HTTP status, timeout, connection, malformed body) mapped to AccountProviderError
    - Never retries: account creation is not idempotent, the caller decides what to do

Design Decisions:
    - httpx.AsyncClient per call: signup is rare, no pool worth keeping open
    - Service-role key sent as both apikey and bearer token (admin endpoints require both)
"""

import logging
from uuid import UUID

import httpx

from threesby.core.errors import AccountProviderError, DomainValidationError

logger = logging.getLogger(__name__)


class HostedAuthAccountProvider:
    """AccountProvider backed by the hosted auth service (`/admin/users`)."""

    def __init__(
        self, base_url: str, service_key: str, timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
        }

    async def create_account(self, email: str, password: str) -> UUID:
        """Create a confirmed account. Returns the new account id."""
        body = await self._request(
            "POST", "/admin/users", "create_account",
            json={"email": email, "password": password, "email_confirm": True},
        )
        try:
            return UUID(body["id"])
        except (KeyError, TypeError, ValueError):
            raise AccountProviderError("response missing account id", "create_account")

    async def delete_account(self, account_id: UUID) -> None:
        await self._request("DELETE", f"/admin/users/{account_id}", "delete_account")
        logger.info(f"Deleted account {account_id}", extra={"profile_id": account_id})

    async def _request(self, method: str, path: str, operation: str, **kwargs) -> dict:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, headers=self._headers,
                timeout=self.timeout_seconds, transport=self._transport,
            ) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if operation == "create_account" and e.response.status_code in (409, 422):
                raise DomainValidationError(
                    "An account with this email already exists", "email",
                )
            logger.warning(
                f"Auth service {operation} returned {e.response.status_code}",
            )
            raise AccountProviderError(
                f"HTTP {e.response.status_code}", operation,
            )
        except httpx.TimeoutException:
            raise AccountProviderError("timeout", operation)
        except httpx.HTTPError as e:
            logger.error(f"Auth service {operation} transport error: {e}")
            raise AccountProviderError("connection error", operation)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            raise AccountProviderError("invalid JSON response", operation)
