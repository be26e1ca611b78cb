"""
Product category proxy routes.

GET    /api/categories                 — list (per_page, page, search, parent forwarded)
POST   /api/categories                 — create
PUT    /api/categories?categoryId=N    — update
DELETE /api/categories?categoryId=N    — delete permanently
"""

from aiohttp import web

from shopadmin.activity import activity
from shopadmin.services.woocommerce import WooCommerceError
from shopadmin.web.proxy import bad_request, error_response, get_woo, query_params, read_json

routes = web.RouteTableDef()


@routes.get("/api/categories")
async def list_categories(request: web.Request) -> web.Response:
    params = query_params(request, "per_page", "page", "search", "parent")
    try:
        response = await get_woo(request).get("products/categories", params)
    except WooCommerceError as e:
        return error_response(e, "GET products/categories", "Failed to fetch categories")

    activity.category("list")
    return web.json_response(response.data)


@routes.post("/api/categories")
async def create_category(request: web.Request) -> web.Response:
    data = await read_json(request)
    try:
        response = await get_woo(request).post("products/categories", data)
    except WooCommerceError as e:
        return error_response(e, "POST products/categories", "Failed to create category")

    activity.category("create", data.get("name", ""))
    return web.json_response(response.data, status=201)


@routes.put("/api/categories")
async def update_category(request: web.Request) -> web.Response:
    category_id = request.query.get("categoryId")
    if not category_id:
        return bad_request("Category ID is required for PUT request")

    data = await read_json(request)
    try:
        response = await get_woo(request).put(f"products/categories/{category_id}", data)
    except WooCommerceError as e:
        return error_response(e, f"PUT products/categories/{category_id}", "Failed to update category")

    activity.category("update", f"#{category_id}")
    return web.json_response(response.data)


@routes.delete("/api/categories")
async def delete_category(request: web.Request) -> web.Response:
    category_id = request.query.get("categoryId")
    if not category_id:
        return bad_request("Category ID is required for DELETE request")

    try:
        response = await get_woo(request).delete(
            f"products/categories/{category_id}", {"force": True},
        )
    except WooCommerceError as e:
        return error_response(e, f"DELETE products/categories/{category_id}", "Failed to delete category")

    activity.category("delete", f"#{category_id}")
    return web.json_response(response.data)
