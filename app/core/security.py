"""Bearer-token authentication and permission gating.

A request is authorised in three steps:
  1. ``Authorization: Bearer <token>`` must be present and well formed.
  2. The token is checked by the identity service's introspection endpoint.
  3. The JWT claims are read to obtain ``sub`` and ``permissions``. When
     ``JWT_SECRET`` is configured the signature is verified locally too.

Routes declare their requirement with ``Depends(require_permission(...))``.
"""


import logging
from dataclasses import dataclass, field

import httpx
from fastapi import Depends, Request
from jose import JWTError, jwt

from app.core.config import settings
from app.core.exceptions import UnauthorizedError
from app.core.log import with_fields

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Permission names issued by the identity service
# ---------------------------------------------------------------------------

VEHICLE_ACCESS = "vehicle.access"
VEHICLE_CREATE = "vehicle.create"
VEHICLE_EDIT = "vehicle.edit"
VEHICLE_DELETE = "vehicle.delete"

SHIPPING_ACCESS = "shipping.access"
SHIPPING_EDIT = "shipping.edit"
SALES_ACCESS = "sales.access"
SALES_EDIT = "sales.edit"
FINANCIAL_ACCESS = "financial.access"
FINANCIAL_EDIT = "financial.edit"
PURCHASE_ACCESS = "purchase.access"
PURCHASE_EDIT = "purchase.edit"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""

    user_id: str
    permissions: frozenset[str] = field(default_factory=frozenset)
    authorization: str = ""

    def has(self, permission: str) -> bool:
        return permission in self.permissions


class TokenVerifier:
    """Validates bearer tokens against the introspection endpoint and reads their claims."""

    def __init__(
        self,
        introspect_url: str,
        secret: str | None = None,
        algorithms: list[str] | None = None,
        timeout: float = 10.0,
    ):
        self._introspect_url = introspect_url
        self._secret = secret
        self._algorithms = algorithms or ["HS256"]
        self._timeout = timeout

    async def authenticate(self, authorization: str | None) -> Principal:
        if not authorization:
            raise UnauthorizedError("Missing authorization header")

        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
            raise UnauthorizedError("Invalid authorization header format")
        token = parts[1]

        await self._introspect(token)
        claims = self._decode(token)

        permissions = claims.get("permissions") or []
        if not isinstance(permissions, list):
            raise UnauthorizedError("Invalid authorization header")
        return Principal(
            user_id=str(claims.get("sub") or ""),
            permissions=frozenset(str(p) for p in permissions),
            authorization=authorization,
        )

    async def _introspect(self, token: str) -> None:
        if not self._introspect_url:
            if self._secret:
                return
            logger.error("Neither INTROSPECT_URL nor JWT_SECRET is configured")
            raise UnauthorizedError("Invalid authorization header")

        log = with_fields(logger, endpoint=self._introspect_url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(
                    self._introspect_url,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            log.warning("Introspection request failed: %s", exc)
            raise UnauthorizedError("Invalid authorization header") from exc

        if resp.status_code != 200:
            log.with_fields(status_code=resp.status_code).warning("Token introspection failed")
            raise UnauthorizedError("Invalid authorization header")

    def _decode(self, token: str) -> dict:
        try:
            if self._secret:
                return jwt.decode(
                    token,
                    self._secret,
                    algorithms=self._algorithms,
                    options={"verify_aud": False},
                )
            return jwt.get_unverified_claims(token)
        except JWTError as exc:
            logger.warning("Failed to decode token: %s", exc)
            raise UnauthorizedError("Invalid authorization header") from exc


_verifier = TokenVerifier(
    settings.introspect_url,
    secret=settings.jwt_secret,
    algorithms=settings.jwt_algorithm_list,
    timeout=settings.outbound_timeout_seconds,
)


def get_token_verifier() -> TokenVerifier:
    return _verifier


def require_permission(permission: str):
    """Build a dependency that authenticates the caller and checks *permission*."""

    async def dependency(
        request: Request,
        verifier: TokenVerifier = Depends(get_token_verifier),
    ) -> Principal:
        principal = await verifier.authenticate(request.headers.get("Authorization"))
        if not principal.has(permission):
            with_fields(
                logger,
                path=request.url.path,
                required_permission=permission,
                user_id=principal.user_id,
            ).warning("Permission denied")
            raise UnauthorizedError("No Valid Permission")
        return principal

    return dependency
