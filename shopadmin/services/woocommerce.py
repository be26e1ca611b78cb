"""
ShopAdmin WooCommerce Client

Async wrapper around the WooCommerce REST API (wc/v3).
Every catalog read and write in the admin goes through this client.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any

import aiohttp

logger = logging.getLogger(__name__)


class WooCommerceError(Exception):
    """An upstream call failed (HTTP error, connection error or timeout)."""

    def __init__(self, message: str, status: int | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


@dataclass
class WooResponse:
    """Decoded upstream response."""
    status: int
    data: Any
    headers: Any = field(default_factory=dict)


def _clean_params(params: dict | None) -> dict:
    """Drop None values and render booleans the way the REST API expects."""
    result = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        result[key] = value
    return result


def total_pages(response: WooResponse) -> int:
    """Read the X-WP-TotalPages header (defaults to 1)."""
    raw = response.headers.get("X-WP-TotalPages")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 1


class WooCommerceClient:
    """REST client for a WooCommerce store."""

    def __init__(
        self,
        url: str,
        consumer_key: str,
        consumer_secret: str,
        version: str = "wc/v3",
        query_string_auth: bool = True,
        timeout: float = 30.0,
    ):
        """
        Initialize the client.

        Args:
            url: Store root URL (e.g., https://shop.example.com)
            consumer_key: REST API consumer key (ck_...)
            consumer_secret: REST API consumer secret (cs_...)
            version: REST namespace, appended after /wp-json/
            query_string_auth: Send credentials as query parameters
                               instead of HTTP basic auth
            timeout: Total timeout per request, in seconds
        """
        self.url = url.rstrip("/")
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.version = version.strip("/")
        self.query_string_auth = query_string_auth
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    @property
    def base_url(self) -> str:
        return f"{self.url}/wp-json/{self.version}/"

    async def start(self) -> None:
        """Initialize the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
            logger.info(f"WooCommerce client started (store: {self.url}, api: {self.version})")
            if self.plain_http:
                logger.warning(
                    f"Store URL {self.url} is not HTTPS: WooCommerce rejects consumer key/secret "
                    "authentication over plain HTTP (OAuth 1.0a signing is not supported)"
                )

    @property
    def plain_http(self) -> bool:
        """True when credentials would travel over a non-TLS connection."""
        return self.url.lower().startswith("http://")

    async def stop(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
            logger.info("WooCommerce client stopped")

    async def get(self, path: str, params: dict | None = None) -> WooResponse:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Any = None, params: dict | None = None) -> WooResponse:
        return await self.request("POST", path, params=params, data=data)

    async def put(self, path: str, data: Any = None, params: dict | None = None) -> WooResponse:
        return await self.request("PUT", path, params=params, data=data)

    async def delete(self, path: str, params: dict | None = None) -> WooResponse:
        return await self.request("DELETE", path, params=params)

    async def request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        data: Any = None,
    ) -> WooResponse:
        """
        Send one request to the store.

        Args:
            method: HTTP method
            path: Endpoint relative to the API root (e.g., "products/12")
            params: Query parameters
            data: JSON body for POST/PUT

        Returns:
            WooResponse with the decoded JSON body and response headers

        Raises:
            WooCommerceError: On non-2xx status, connection error or timeout
        """
        if self._session is None:
            await self.start()

        url = self.base_url + path.lstrip("/")
        query = _clean_params(params)
        auth = None
        if self.query_string_auth:
            query["consumer_key"] = self.consumer_key
            query["consumer_secret"] = self.consumer_secret
        else:
            auth = aiohttp.BasicAuth(self.consumer_key, self.consumer_secret)

        logger.debug(f"{method} {url} params={_clean_params(params)}")

        try:
            async with self._session.request(
                method,
                url,
                params=query,
                json=data,
                auth=auth,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                text = await response.text()
                try:
                    body = json.loads(text) if text else None
                except json.JSONDecodeError:
                    body = text

                if response.status >= 400:
                    message = None
                    if isinstance(body, dict):
                        message = body.get("message")
                    raise WooCommerceError(
                        message or f"Request failed with status code {response.status}",
                        status=response.status,
                        details=body,
                    )

                return WooResponse(
                    status=response.status,
                    data=body,
                    headers=response.headers.copy(),
                )

        except aiohttp.ClientError as e:
            raise WooCommerceError(f"WooCommerce connection error: {e}") from e
        except asyncio.TimeoutError as e:
            raise WooCommerceError(f"WooCommerce request timed out after {self.timeout}s") from e
