"""
Helpers shared by the /api proxy routes.

Each proxy handler forwards one call to WooCommerce. Upstream failures come
back as {"message": ...} with the upstream status, or 500 when the store
never answered.
"""

import json
import logging

from aiohttp import web

from shopadmin.activity import activity
from shopadmin.services.woocommerce import WooCommerceClient, WooCommerceError

logger = logging.getLogger(__name__)


def get_woo(request: web.Request) -> WooCommerceClient:
    return request.app["woo"]


def error_response(error: WooCommerceError, call: str, fallback: str) -> web.Response:
    """Log an upstream failure and mirror it to the browser."""
    logger.error(f"Error during {call}: {error.details if error.details is not None else error.message}")
    activity.woo_error(call, error.status, error.message)
    return web.json_response(
        {"message": error.message or fallback},
        status=error.status or 500,
    )


def bad_request(message: str) -> web.Response:
    return web.json_response({"message": message}, status=400)


async def read_json(request: web.Request) -> dict:
    """Decode the request body, 400 on malformed JSON."""
    try:
        body = await request.json()
    except ValueError:
        # JSONDecodeError, or UnicodeDecodeError on a non UTF-8 body
        raise web.HTTPBadRequest(
            text=json.dumps({"message": "Invalid JSON"}),
            content_type="application/json",
        )
    if not isinstance(body, dict):
        raise web.HTTPBadRequest(
            text=json.dumps({"message": "JSON object expected"}),
            content_type="application/json",
        )
    return body


def query_params(request: web.Request, *names: str) -> dict:
    """Non-empty query parameters among `names`."""
    return {name: request.query[name] for name in names if request.query.get(name)}
