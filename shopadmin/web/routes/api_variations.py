"""
Product variation proxy routes.

GET    /api/variations?productId=P                  — list variations of P
POST   /api/variations?productId=P                  — create
PUT    /api/variations?productId=P&variationId=V    — update
DELETE /api/variations?productId=P&variationId=V    — delete permanently
"""

from aiohttp import web

from shopadmin.activity import activity
from shopadmin.services.woocommerce import WooCommerceError
from shopadmin.web.proxy import bad_request, error_response, get_woo, read_json

routes = web.RouteTableDef()


def _ids(request: web.Request, need_variation: bool) -> tuple[str | None, str | None, web.Response | None]:
    """Extract productId/variationId, or a 400 response when missing."""
    product_id = request.query.get("productId")
    if not product_id:
        return None, None, bad_request("Product ID is required")
    variation_id = request.query.get("variationId")
    if need_variation and not variation_id:
        return product_id, None, bad_request("Variation ID is required")
    return product_id, variation_id, None


@routes.get("/api/variations")
async def list_variations(request: web.Request) -> web.Response:
    product_id, _, error = _ids(request, need_variation=False)
    if error:
        return error

    path = f"products/{product_id}/variations"
    try:
        response = await get_woo(request).get(path)
    except WooCommerceError as e:
        return error_response(e, f"GET {path}", "Failed to fetch variations")

    activity.variation("list", product_id)
    return web.json_response(response.data)


@routes.post("/api/variations")
async def create_variation(request: web.Request) -> web.Response:
    product_id, _, error = _ids(request, need_variation=False)
    if error:
        return error

    data = await read_json(request)
    path = f"products/{product_id}/variations"
    try:
        response = await get_woo(request).post(path, data)
    except WooCommerceError as e:
        return error_response(e, f"POST {path}", "Failed to create variation")

    activity.variation("create", product_id, (response.data or {}).get("id"))
    return web.json_response(response.data, status=201)


@routes.put("/api/variations")
async def update_variation(request: web.Request) -> web.Response:
    product_id, variation_id, error = _ids(request, need_variation=True)
    if error:
        return error

    data = await read_json(request)
    data.pop("id", None)
    path = f"products/{product_id}/variations/{variation_id}"
    try:
        response = await get_woo(request).put(path, data)
    except WooCommerceError as e:
        return error_response(e, f"PUT {path}", "Failed to update variation")

    activity.variation("update", product_id, variation_id)
    return web.json_response(response.data)


@routes.delete("/api/variations")
async def delete_variation(request: web.Request) -> web.Response:
    product_id, variation_id, error = _ids(request, need_variation=True)
    if error:
        return error

    path = f"products/{product_id}/variations/{variation_id}"
    try:
        response = await get_woo(request).delete(path, {"force": True})
    except WooCommerceError as e:
        return error_response(e, f"DELETE {path}", "Failed to delete variation")

    activity.variation("delete", product_id, variation_id)
    return web.json_response(response.data)
