"""HTTP client for the retail order-management API that honours discount codes."""

from __future__ import annotations

import asyncio
import hashlib
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

import httpx
from loguru import logger

from rewards_api.core.settings import Settings, settings as app_settings


LOGIN_PATH = "/SZWL-SERVER/tAdmin/loginSys"
PROMO_CODE_ADD_PATH = "/SZWL-SERVER/tPromoCode/add"


class RetailApiError(RuntimeError):
    """Raised when the retail API rejects a call or cannot be reached."""

    code = "EXTERNAL_API_ERROR"

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


@dataclass(frozen=True)
class RetailSession:
    token: str
    admin_id: int
    username: str | None = None


def format_discount(amount_cents: int) -> str:
    """Render cents as the plain dollar string the retail API expects (``250`` -> ``2.5``)."""

    return format(Decimal(amount_cents) / Decimal(100), "f")


def _parse_envelope(response: httpx.Response, *, url: str) -> Mapping[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise RetailApiError("Retail API returned a non-JSON body", url=url) from exc
    if not isinstance(payload, Mapping):
        raise RetailApiError("Retail API returned an unexpected payload", url=url)
    if not payload.get("success"):
        message = payload.get("message") or "unknown error"
        raise RetailApiError(f"Retail API call failed: {message}", url=url)
    return payload


class RetailApiClient:
    """Logs in lazily and registers discount codes so stores accept them."""

    def __init__(
        self,
        *,
        base_url: str,
        username: str,
        password: str,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None
        self._session: RetailSession | None = None
        self._login_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, config: Settings = app_settings) -> "RetailApiClient":
        return cls(
            base_url=config.retail_api_base_url,
            username=config.retail_api_username,
            password=config.retail_api_password,
            timeout=config.retail_api_timeout_seconds,
        )

    @property
    def session(self) -> RetailSession | None:
        return self._session

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def login(self) -> RetailSession:
        url = f"{self._base_url}{LOGIN_PATH}"
        password_hash = hashlib.md5(self._password.encode("utf-8")).hexdigest()
        try:
            response = await self._client.post(
                url,
                json={"username": self._username, "password": password_hash},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RetailApiError(str(exc), url=url) from exc

        payload = _parse_envelope(response, url=url)
        data = payload.get("data")
        if not isinstance(data, Mapping) or not data.get("currentToken") or data.get("id") is None:
            raise RetailApiError("Retail API login response is missing session data", url=url)

        try:
            admin_id = int(data["id"])
        except (TypeError, ValueError) as exc:
            raise RetailApiError("Retail API login returned a non-numeric admin id", url=url) from exc

        self._session = RetailSession(
            token=str(data["currentToken"]),
            admin_id=admin_id,
            username=data.get("name"),
        )
        logger.info("Retail API login succeeded", admin_id=self._session.admin_id)
        return self._session

    async def register_discount_code(self, code: str, *, amount_cents: int, validity_months: int) -> None:
        if len(code) != 6 or not code.isdigit():
            raise ValueError("Discount code must be exactly six digits")
        if amount_cents <= 0:
            raise ValueError("Discount amount must be positive")
        if not 1 <= validity_months <= 3:
            raise ValueError("Validity must be between 1 and 3 months")

        session = await self._ensure_session()
        url = f"{self._base_url}{PROMO_CODE_ADD_PATH}"
        params = {
            "addMode": "2",
            "codeNum": code,
            "number": "1",
            "month": str(validity_months),
            "type": "1",
            "discount": format_discount(amount_cents),
            "frpCode": "WEIXIN_NATIVE",
            "adminId": str(session.admin_id),
        }

        response = await self._send_promo_request(url, params, session)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            # token expired; log in again once
            self._session = None
            session = await self._ensure_session()
            params["adminId"] = str(session.admin_id)
            response = await self._send_promo_request(url, params, session)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RetailApiError(str(exc), url=url) from exc
        _parse_envelope(response, url=url)

        logger.info(
            "Registered discount code with retail API",
            amount_cents=amount_cents,
            validity_months=validity_months,
        )

    async def _send_promo_request(
        self,
        url: str,
        params: Mapping[str, str],
        session: RetailSession,
    ) -> httpx.Response:
        try:
            return await self._client.get(url, params=params, headers={"Authorization": session.token})
        except httpx.HTTPError as exc:
            raise RetailApiError(str(exc), url=url) from exc

    async def _ensure_session(self) -> RetailSession:
        if self._session is not None:
            return self._session
        async with self._login_lock:
            if self._session is None:
                await self.login()
        assert self._session is not None
        return self._session


__all__ = ["RetailApiClient", "RetailApiError", "RetailSession", "format_discount"]
