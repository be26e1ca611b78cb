"""
Product pages — list, create, edit, delete.

GET  /products                 — paginated list with search
GET  /products/new             — creation form
POST /products/new             — create (or add/remove an attribute row)
GET  /products/{id}/edit       — edit form
POST /products/{id}/edit       — save (or add/remove an attribute row)
GET  /products/{id}/delete     — confirmation dialog
POST /products/{id}/delete     — delete permanently
POST /products/pricing         — HTMX partial: recomputed pricing section
"""

import asyncio
import logging
from dataclasses import dataclass, field
from urllib.parse import urlencode

import aiohttp_jinja2
from aiohttp import web

from shopadmin.acf import (
    AUTO_MARGIN_FIELDS,
    CAS_OPTIONS,
    TAILLE_DUST_BAG_OPTIONS,
    VISUELS_OPTIONS,
    AcfFields,
    below_cost_fields,
    recompute,
)
from shopadmin.activity import activity
from shopadmin.forms import (
    PRODUCT_STATUSES,
    PRODUCT_TYPES,
    FormError,
    build_product_payload,
    parse_acf_form,
    parse_previous_acf,
    product_from_form,
)
from shopadmin.pagination import visible_pages
from shopadmin.services.woocommerce import WooCommerceClient, WooCommerceError, total_pages
from shopadmin.web.proxy import get_woo
from shopadmin.web.routes.api_products import list_params

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()

TOAST_MESSAGES = {
    "created": ("success", 'Produit "{name}" créé avec succès !'),
    "updated": ("success", 'Produit "{name}" mis à jour avec succès !'),
    "deleted": ("success", 'Produit "{name}" supprimé avec succès !'),
}

EMPTY_PRODUCT = {
    "name": "",
    "type": "simple",
    "status": "draft",
    "regular_price": "",
    "sale_price": "",
    "description": "",
    "short_description": "",
    "sku": "",
    "stock_quantity": None,
    "manage_stock": False,
    "images": [],
    "categories": [],
    "attributes": [],
    "meta_data": [],
}


def toast(message: str, kind: str = "info") -> dict:
    return {"type": kind, "message": message}


def toast_from_query(query) -> dict | None:
    """Rebuild the toast announced by a redirect (?toast=created&name=...)."""
    code = query.get("toast")
    if not code:
        return None
    if code == "error":
        return toast(query.get("message") or "Une erreur est survenue.", "error")
    if code not in TOAST_MESSAGES:
        return None
    kind, template = TOAST_MESSAGES[code]
    return toast(template.format(name=query.get("name", "")), kind)


def _redirect(path: str, **params) -> web.HTTPSeeOther:
    query = urlencode({k: v for k, v in params.items() if v not in (None, "")})
    return web.HTTPSeeOther(f"{path}?{query}" if query else path)


# =========================================================================
# LIST
# =========================================================================


@routes.get("/")
async def index(request: web.Request) -> web.Response:
    raise web.HTTPFound("/products")


@routes.get("/products")
async def list_products_page(request: web.Request) -> web.Response:
    """Render one page of products."""
    config = request.app["config"]
    search = request.query.get("search", "").strip()
    try:
        page = max(1, int(request.query.get("page", "1")))
    except ValueError:
        page = 1

    params = list_params({
        "page": str(page),
        "per_page": str(config.web.per_page),
        "search": search,
    })

    toasts = []
    notice = toast_from_query(request.query)
    if notice:
        toasts.append(notice)

    products: list[dict] = []
    pages_total = 1
    error = None
    status = 200
    try:
        response = await get_woo(request).get("products", params)
        products = response.data or []
        pages_total = total_pages(response)
        activity.product_list(page, search, len(products))
    except WooCommerceError as e:
        logger.error(f"Error fetching products: {e.details if e.details is not None else e.message}")
        activity.woo_error("GET products", e.status, e.message)
        error = e.message or "Erreur lors du chargement des produits."
        toasts.append(toast(error, "error"))
        status = e.status or 500

    context = {
        "page": "products",
        "products": products,
        "current_page": page,
        "total_pages": pages_total,
        "pages": visible_pages(page, pages_total),
        "search": search,
        "error": error,
        "toasts": toasts,
    }
    return aiohttp_jinja2.render_template("products/list.html", request, context, status=status)


# =========================================================================
# DELETE
# =========================================================================


@routes.get("/products/{id}/delete")
async def confirm_delete(request: web.Request) -> web.Response:
    """Ask for confirmation before deleting permanently."""
    product_id = request.match_info["id"]
    try:
        response = await get_woo(request).get(f"products/{product_id}")
    except WooCommerceError as e:
        activity.woo_error(f"GET products/{product_id}", e.status, e.message)
        raise _redirect("/products", toast="error", message=e.message)

    context = {
        "page": "products",
        "product": response.data or {},
        "return_page": request.query.get("page", ""),
        "toasts": [],
    }
    return aiohttp_jinja2.render_template("products/confirm_delete.html", request, context)


@routes.post("/products/{id}/delete")
async def delete_product_page(request: web.Request) -> web.Response:
    product_id = request.match_info["id"]
    form = await request.post()
    name = form.get("name", "")
    return_page = form.get("page", "")

    try:
        await get_woo(request).delete(f"products/{product_id}", {"force": True})
    except WooCommerceError as e:
        logger.error(f"Error deleting product {product_id}: {e.details if e.details is not None else e.message}")
        activity.woo_error(f"DELETE products/{product_id}", e.status, e.message)
        raise _redirect(
            "/products", toast="error", page=return_page,
            message=e.message or "Erreur lors de la suppression du produit.",
        )

    activity.product_delete(product_id)
    raise _redirect("/products", toast="deleted", name=name, page=return_page)


# =========================================================================
# CREATE / EDIT FORM
# =========================================================================


@dataclass
class CatalogChoices:
    """Reference data the product form offers to pick from."""
    global_attributes: list[dict] = field(default_factory=list)
    categories: list[dict] = field(default_factory=list)
    terms: dict[int, list[dict]] = field(default_factory=dict)
    toasts: list[dict] = field(default_factory=list)


async def _fetch_terms(woo: WooCommerceClient, attribute_id: int) -> list[dict]:
    try:
        response = await woo.get(f"products/attributes/{attribute_id}/terms", {"per_page": 100})
    except WooCommerceError as e:
        logger.warning(f"Failed to fetch terms for attribute ID {attribute_id}: {e.message}")
        return []
    return response.data or []


async def load_choices(woo: WooCommerceClient, attributes: list[dict]) -> CatalogChoices:
    """Global attributes, categories and the terms of attached attributes."""
    choices = CatalogChoices()

    try:
        choices.global_attributes = (await woo.get("products/attributes")).data or []
    except WooCommerceError as e:
        activity.woo_error("GET products/attributes", e.status, e.message)
        choices.toasts.append(toast("Erreur lors du chargement des attributs globaux.", "error"))

    try:
        choices.categories = (await woo.get("products/categories", {"per_page": 100})).data or []
    except WooCommerceError as e:
        activity.woo_error("GET products/categories", e.status, e.message)
        choices.toasts.append(toast("Erreur lors du chargement des catégories.", "error"))

    attribute_ids = [attr["id"] for attr in attributes if attr.get("id")]
    fetched = await asyncio.gather(*(_fetch_terms(woo, attr_id) for attr_id in attribute_ids))
    choices.terms = dict(zip(attribute_ids, fetched))
    return choices


async def render_form(
    request: web.Request,
    *,
    product: dict,
    acf: AcfFields,
    product_id: str | None = None,
    errors: dict | None = None,
    toasts: list[dict] | None = None,
    status: int = 200,
) -> web.Response:
    choices = await load_choices(get_woo(request), product.get("attributes", []))
    attached = {attr.get("id") for attr in product.get("attributes", []) if attr.get("id")}

    context = {
        "page": "products",
        "mode": "edit" if product_id else "new",
        "product_id": product_id,
        "action_url": f"/products/{product_id}/edit" if product_id else "/products/new",
        "product": product,
        "selected_categories": {c.get("id") for c in product.get("categories", [])},
        "acf": acf,
        "below_cost": below_cost_fields(acf),
        "auto_fields": AUTO_MARGIN_FIELDS,
        "cas_options": CAS_OPTIONS,
        "taille_dust_bag_options": TAILLE_DUST_BAG_OPTIONS,
        "visuels_options": VISUELS_OPTIONS,
        "statuses": PRODUCT_STATUSES,
        "product_types": PRODUCT_TYPES,
        "addable_attributes": [a for a in choices.global_attributes if a.get("id") not in attached],
        "categories": choices.categories,
        "terms": choices.terms,
        "errors": errors or {},
        "toasts": (toasts or []) + choices.toasts,
    }
    return aiohttp_jinja2.render_template("products/form.html", request, context, status=status)


async def _attribute_action(request: web.Request, form, action: str, product_id: str | None) -> web.Response:
    """Add or remove an attribute row without saving the product."""
    product = product_from_form(form)
    acf = recompute(parse_acf_form(form), parse_previous_acf(form))
    attributes = product["attributes"]
    toasts = []

    if action == "add_attribute":
        raw_id = form.get("new_attribute", "")
        if raw_id.isdigit():
            attr_id = int(raw_id)
            existing = next((a for a in attributes if a.get("id") == attr_id), None)
            if existing:
                toasts.append(toast(f'L\'attribut "{existing["name"]}" est déjà ajouté.', "info"))
            else:
                try:
                    global_attributes = (await get_woo(request).get("products/attributes")).data or []
                except WooCommerceError as e:
                    activity.woo_error("GET products/attributes", e.status, e.message)
                    global_attributes = []
                    toasts.append(toast(e.message or "Erreur lors de l'ajout de l'attribut.", "error"))
                selected = next((a for a in global_attributes if a.get("id") == attr_id), None)
                if selected:
                    attributes.append({
                        "id": selected["id"],
                        "name": selected["name"],
                        "position": len(attributes),
                        "visible": True,
                        "variation": False,
                        "options": [],
                    })
                    toasts.append(toast(f'Attribut "{selected["name"]}" ajouté.', "success"))
        else:
            custom_name = (form.get("new_custom_attribute") or "").strip()
            if custom_name:
                attributes.append({
                    "name": custom_name,
                    "position": len(attributes),
                    "visible": True,
                    "variation": False,
                    "options": [],
                })
                toasts.append(toast(f'Attribut "{custom_name}" ajouté.', "success"))

    elif action.startswith("remove_attribute:"):
        index = action.split(":", 1)[1]
        if index.isdigit() and int(index) < len(attributes):
            removed = attributes.pop(int(index))
            toasts.append(toast(f'Attribut "{removed["name"]}" supprimé.', "success"))

    for position, attr in enumerate(attributes):
        attr["position"] = position

    return await render_form(request, product=product, acf=acf, product_id=product_id, toasts=toasts)


async def _save(request: web.Request, product_id: str | None) -> web.Response:
    """Validate the posted form, then create or update the product."""
    woo = get_woo(request)
    form = await request.post()
    action = form.get("action") or "save"
    if action != "save":
        return await _attribute_action(request, form, action, product_id)

    def _failed(message: str, status: int, errors: dict | None = None) -> web.Response:
        return render_form(
            request,
            product=product_from_form(form),
            acf=recompute(parse_acf_form(form), parse_previous_acf(form)),
            product_id=product_id,
            errors=errors,
            toasts=[toast(message, "error")],
            status=status,
        )

    existing_meta: list[dict] = []
    if product_id:
        try:
            existing = (await woo.get(f"products/{product_id}")).data or {}
            existing_meta = existing.get("meta_data", [])
        except WooCommerceError as e:
            activity.woo_error(f"GET products/{product_id}", e.status, e.message)
            return await _failed(e.message, e.status or 500)

    try:
        payload, _ = build_product_payload(form, existing_meta)
    except FormError as e:
        return await _failed("Le formulaire contient des erreurs.", 400, e.errors)

    try:
        if product_id:
            response = await woo.put(f"products/{product_id}", payload)
        else:
            response = await woo.post("products", payload)
    except WooCommerceError as e:
        call = f"PUT products/{product_id}" if product_id else "POST products"
        logger.error(f"Save error ({call}): {e.details if e.details is not None else e.message}")
        activity.woo_error(call, e.status, e.message)
        fallback = "Échec de la sauvegarde du produit." if product_id else "Échec de la création du produit."
        return await _failed(e.message or fallback, e.status or 500)

    saved = response.data or {}
    if product_id:
        activity.product_update(product_id, payload["name"])
        raise _redirect("/products", toast="updated", name=payload["name"])

    activity.product_create(payload["name"], saved.get("id"))
    raise _redirect("/products", toast="created", name=payload["name"])


@routes.get("/products/new")
async def new_product_page(request: web.Request) -> web.Response:
    return await render_form(request, product=dict(EMPTY_PRODUCT), acf=recompute(AcfFields()))


@routes.post("/products/new")
async def create_product_page(request: web.Request) -> web.Response:
    return await _save(request, product_id=None)


@routes.get("/products/{id}/edit")
async def edit_product_page(request: web.Request) -> web.Response:
    product_id = request.match_info["id"]
    try:
        response = await get_woo(request).get(f"products/{product_id}")
    except WooCommerceError as e:
        activity.woo_error(f"GET products/{product_id}", e.status, e.message)
        raise _redirect("/products", toast="error", message=e.message)

    product = response.data or {}
    activity.product_read(product_id)
    # Stored auto-margin prices are re-derived from the stored total on load
    acf = recompute(AcfFields.from_meta_data(product.get("meta_data")), AcfFields())
    return await render_form(request, product=product, acf=acf, product_id=product_id)


@routes.post("/products/{id}/edit")
async def update_product_page(request: web.Request) -> web.Response:
    return await _save(request, product_id=request.match_info["id"])


# =========================================================================
# PRICING PARTIAL
# =========================================================================


@routes.post("/products/pricing")
async def pricing_partial(request: web.Request) -> web.Response:
    """Recompute derived prices from the posted inputs (HTMX target)."""
    form = await request.post()
    acf = recompute(parse_acf_form(form), parse_previous_acf(form))
    context = {
        "acf": acf,
        "below_cost": below_cost_fields(acf),
        "auto_fields": AUTO_MARGIN_FIELDS,
    }
    return aiohttp_jinja2.render_template("products/_pricing.html", request, context)
