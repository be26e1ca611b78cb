"""
Product proxy routes.

GET    /api/products        — paginated list {"products", "totalPages"}
POST   /api/products        — create
GET    /api/products/{id}   — read one
PUT    /api/products/{id}   — update (body id ignored)
DELETE /api/products/{id}   — delete permanently
"""

import logging

from aiohttp import web

from shopadmin.activity import activity
from shopadmin.services.woocommerce import WooCommerceError, total_pages
from shopadmin.web.proxy import error_response, get_woo, read_json

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


def list_params(query) -> dict:
    """Pagination and search parameters forwarded to GET products."""
    params = {
        "page": query.get("page") or "1",
        "per_page": query.get("per_page") or "10",
        "orderby": query.get("orderby") or "id",
        "order": query.get("order") or "asc",
    }
    search = query.get("search") or ""
    if search:
        params["search"] = search
    return params


@routes.get("/api/products")
async def list_products(request: web.Request) -> web.Response:
    """Return one page of products and the page count."""
    params = list_params(request.query)
    try:
        response = await get_woo(request).get("products", params)
    except WooCommerceError as e:
        return error_response(e, "GET products", "Failed to fetch products")

    activity.product_list(params["page"], params.get("search", ""), len(response.data or []))
    return web.json_response({
        "products": response.data,
        "totalPages": total_pages(response),
    })


@routes.post("/api/products")
async def create_product(request: web.Request) -> web.Response:
    product_data = await read_json(request)
    try:
        response = await get_woo(request).post("products", product_data)
    except WooCommerceError as e:
        return error_response(e, "POST products", "Failed to create product")

    created = response.data or {}
    activity.product_create(created.get("name", product_data.get("name", "")), created.get("id"))
    return web.json_response(response.data, status=201)


@routes.get("/api/products/{id}")
async def get_product(request: web.Request) -> web.Response:
    product_id = request.match_info["id"]
    try:
        response = await get_woo(request).get(f"products/{product_id}")
    except WooCommerceError as e:
        return error_response(e, f"GET products/{product_id}", "Failed to fetch product")

    activity.product_read(product_id)
    return web.json_response(response.data)


@routes.put("/api/products/{id}")
async def update_product(request: web.Request) -> web.Response:
    product_id = request.match_info["id"]
    product_data = await read_json(request)
    product_data.pop("id", None)
    try:
        response = await get_woo(request).put(f"products/{product_id}", product_data)
    except WooCommerceError as e:
        return error_response(e, f"PUT products/{product_id}", "Failed to update product")

    activity.product_update(product_id, product_data.get("name", ""))
    return web.json_response(response.data)


@routes.delete("/api/products/{id}")
async def delete_product(request: web.Request) -> web.Response:
    product_id = request.match_info["id"]
    try:
        response = await get_woo(request).delete(f"products/{product_id}", {"force": True})
    except WooCommerceError as e:
        return error_response(e, f"DELETE products/{product_id}", "Failed to delete product")

    activity.product_delete(product_id)
    return web.json_response(response.data)
