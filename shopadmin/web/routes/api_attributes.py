"""
Global attribute proxy routes.

GET    /api/attributes                  — all global attributes
GET    /api/attributes?attributeId=N    — terms of attribute N
POST   /api/attributes                  — create a global attribute
PUT    /api/attributes?attributeId=N    — update attribute N
DELETE /api/attributes?attributeId=N    — delete attribute N
"""

from aiohttp import web

from shopadmin.activity import activity
from shopadmin.services.woocommerce import WooCommerceError
from shopadmin.web.proxy import bad_request, error_response, get_woo, read_json

routes = web.RouteTableDef()


@routes.get("/api/attributes")
async def list_attributes(request: web.Request) -> web.Response:
    """Global attributes, or the terms of one when attributeId is given."""
    attribute_id = request.query.get("attributeId")
    path = f"products/attributes/{attribute_id}/terms" if attribute_id else "products/attributes"
    params = {"per_page": 100} if attribute_id else None
    try:
        response = await get_woo(request).get(path, params)
    except WooCommerceError as e:
        return error_response(e, f"GET {path}", "Failed to fetch attributes or terms")

    activity.attribute("list", f"#{attribute_id} terms" if attribute_id else "")
    return web.json_response(response.data)


@routes.post("/api/attributes")
async def create_attribute(request: web.Request) -> web.Response:
    data = await read_json(request)
    try:
        response = await get_woo(request).post("products/attributes", data)
    except WooCommerceError as e:
        return error_response(e, "POST products/attributes", "Failed to create attribute")

    activity.attribute("create", data.get("name", ""))
    return web.json_response(response.data, status=201)


@routes.put("/api/attributes")
async def update_attribute(request: web.Request) -> web.Response:
    attribute_id = request.query.get("attributeId")
    if not attribute_id:
        return bad_request("Attribute ID is required for PUT request")

    data = await read_json(request)
    try:
        response = await get_woo(request).put(f"products/attributes/{attribute_id}", data)
    except WooCommerceError as e:
        return error_response(e, f"PUT products/attributes/{attribute_id}", "Failed to update attribute")

    activity.attribute("update", f"#{attribute_id}")
    return web.json_response(response.data)


@routes.delete("/api/attributes")
async def delete_attribute(request: web.Request) -> web.Response:
    attribute_id = request.query.get("attributeId")
    if not attribute_id:
        return bad_request("Attribute ID is required for DELETE request")

    try:
        response = await get_woo(request).delete(
            f"products/attributes/{attribute_id}", {"force": True},
        )
    except WooCommerceError as e:
        return error_response(e, f"DELETE products/attributes/{attribute_id}", "Failed to delete attribute")

    activity.attribute("delete", f"#{attribute_id}")
    return web.json_response(response.data)
