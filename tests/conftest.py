"""Shared fixtures: a fake WooCommerce store and the admin app wired to it."""

from dataclasses import dataclass
from typing import Any

import pytest
from aiohttp import web

from shopadmin.config import Config, WebConfig, WooCommerceConfig
from shopadmin.services.woocommerce import WooCommerceClient
from shopadmin.web.server import create_app


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: dict
    json: Any
    authorization: str | None


class FakeWooCommerce:
    """Minimal wc/v3 server: canned responses, every request recorded."""

    def __init__(self) -> None:
        self.url = ""
        self.requests: list[RecordedRequest] = []
        self._responses: dict[tuple[str, str], tuple[int, Any, dict]] = {}
        self.app = web.Application()
        self.app.router.add_route("*", "/wp-json/wc/v3/{tail:.*}", self._handle)

        # Reference data every product form asks for
        self.respond("GET", "products/attributes", [])
        self.respond("GET", "products/categories", [])

    def respond(self, method: str, path: str, body: Any = None, status: int = 200, headers: dict | None = None) -> None:
        self._responses[(method, path)] = (status, body, headers or {})

    def calls(self, method: str | None = None, path: str | None = None) -> list[RecordedRequest]:
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (path is None or r.path == path)
        ]

    def last(self) -> RecordedRequest:
        return self.requests[-1]

    async def _handle(self, request: web.Request) -> web.Response:
        path = request.match_info["tail"]
        body = await request.json() if request.can_read_body else None
        self.requests.append(RecordedRequest(
            method=request.method,
            path=path,
            query=dict(request.query),
            json=body,
            authorization=request.headers.get("Authorization"),
        ))

        if (request.method, path) not in self._responses:
            return web.json_response(
                {
                    "code": "rest_no_route",
                    "message": "No route was found matching the URL and request method.",
                    "data": {"status": 404},
                },
                status=404,
            )

        status, payload, headers = self._responses[(request.method, path)]
        if isinstance(payload, str):
            return web.Response(text=payload, status=status, headers=headers)
        return web.json_response(payload, status=status, headers=headers)


@pytest.fixture
async def woo_server(aiohttp_server):
    """Running fake store; `woo_server.url` is its root URL."""
    fake = FakeWooCommerce()
    server = await aiohttp_server(fake.app)
    fake.url = str(server.make_url("")).rstrip("/")
    return fake


@pytest.fixture
def config(woo_server):
    return Config(
        woocommerce=WooCommerceConfig(
            url=woo_server.url,
            consumer_key="ck_test",
            consumer_secret="cs_test",
        ),
        web=WebConfig(site_name="Test Shop"),
    )


@pytest.fixture
def woo(config):
    cfg = config.woocommerce
    return WooCommerceClient(
        url=cfg.url,
        consumer_key=cfg.consumer_key,
        consumer_secret=cfg.consumer_secret,
    )


@pytest.fixture
async def client(aiohttp_client, config, woo):
    """Test client for the admin app (starts and stops the WooCommerce session)."""
    return await aiohttp_client(create_app(config, woo))


@pytest.fixture
async def offline_client(aiohttp_client):
    """Admin app pointed at a store that refuses connections."""
    config = Config(
        woocommerce=WooCommerceConfig(url="http://127.0.0.1:1", consumer_key="ck", consumer_secret="cs"),
    )
    woo = WooCommerceClient(url="http://127.0.0.1:1", consumer_key="ck", consumer_secret="cs", timeout=5)
    return await aiohttp_client(create_app(config, woo))
