"""
Product form parsing.

Turns the posted product form (create and edit pages) into the JSON
payload WooCommerce expects, and back into template context when the
form has to be shown again.
"""

import re
from typing import Any, Mapping

from shopadmin.acf import (
    BOOL_FIELDS,
    CHOICES,
    AcfFields,
    is_choice,
    merge_meta_data,
    parse_number,
    recompute,
)

PRODUCT_STATUSES = [
    ("draft", "Brouillon"),
    ("pending", "En attente de relecture"),
    ("private", "Privé"),
    ("publish", "Publié"),
]

PRODUCT_TYPES = ["simple", "variable", "grouped", "external"]

_ATTR_KEY = re.compile(r"^attr-(\d+)-name$")

# Non-negative decimal, dot or comma separator, no exponent
_PRICE = re.compile(r"\d+(?:[.,]\d+)?")

# Hidden inputs holding the pricing state as last rendered
PREVIOUS_PREFIX = "previous_"


class FormError(Exception):
    """The posted form is invalid. `errors` maps field name → message."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


def _text(form: Mapping, key: str) -> str:
    return (form.get(key) or "").strip()


def _getall(form: Any, key: str) -> list[str]:
    if hasattr(form, "getall"):
        return list(form.getall(key, []))
    value = form.get(key)
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _checked(form: Mapping, key: str) -> bool:
    return key in form and form.get(key) not in ("", "0", "off")


def _split_options(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_attributes(form: Mapping) -> list[dict]:
    """Collect the attr-<n>-* input groups, ordered by position."""
    indexes = sorted(
        int(m.group(1)) for key in form.keys() if (m := _ATTR_KEY.match(key))
    )

    attributes = []
    for i in indexes:
        prefix = f"attr-{i}-"
        name = _text(form, prefix + "name")
        if not name:
            continue

        attr: dict[str, Any] = {"name": name}
        raw_id = _text(form, prefix + "id")
        if raw_id.isdigit():
            attr["id"] = int(raw_id)
            options = [t.strip() for t in _getall(form, prefix + "terms") if t.strip()]
        else:
            options = _split_options(_text(form, prefix + "options"))

        position = _text(form, prefix + "position")
        attr["position"] = int(position) if position.isdigit() else len(attributes)
        attr["visible"] = _checked(form, prefix + "visible")
        attr["variation"] = _checked(form, prefix + "variation")
        attr["options"] = list(dict.fromkeys(options))
        attributes.append(attr)

    return attributes


def parse_product_form(form: Mapping) -> dict:
    """Build the product fields of the payload (no meta_data).

    Raises:
        FormError: When the name is missing or a price/stock is malformed
    """
    errors: dict[str, str] = {}

    name = _text(form, "name")
    if not name:
        errors["name"] = "Le nom du produit est obligatoire."

    prices = {}
    for key in ("regular_price", "sale_price"):
        raw = _text(form, key)
        if not raw:
            prices[key] = ""
            continue
        if not _PRICE.fullmatch(raw):
            errors[key] = "Prix invalide."
        else:
            prices[key] = raw.replace(",", ".")

    stock_quantity = None
    raw_stock = _text(form, "stock_quantity")
    if raw_stock:
        try:
            stock_quantity = int(raw_stock)
        except ValueError:
            errors["stock_quantity"] = "La quantité doit être un nombre entier."

    status = _text(form, "status") or "draft"
    if status not in {value for value, _ in PRODUCT_STATUSES}:
        errors["status"] = "Statut inconnu."

    product_type = _text(form, "type") or "simple"
    if product_type not in PRODUCT_TYPES:
        errors["type"] = "Type de produit inconnu."

    if errors:
        raise FormError(errors)

    image_url = _text(form, "image_url")
    categories = [
        {"id": int(raw)} for raw in _getall(form, "categories") if str(raw).isdigit()
    ]

    return {
        "name": name,
        "type": product_type,
        "status": status,
        "regular_price": prices["regular_price"],
        "sale_price": prices["sale_price"],
        "description": form.get("description") or "",
        "short_description": form.get("short_description") or "",
        "sku": _text(form, "sku"),
        "stock_quantity": stock_quantity,
        "manage_stock": _checked(form, "manage_stock"),
        "images": [{"src": image_url}] if image_url else [],
        "categories": categories,
        "attributes": parse_attributes(form),
    }


def parse_acf_form(form: Mapping, prefix: str = "") -> AcfFields:
    """Read the custom field inputs (optionally the hidden previous_* set)."""
    values: dict[str, Any] = {}
    for name in AcfFields.keys():
        key = prefix + name
        if name in BOOL_FIELDS:
            values[name] = _checked(form, key)
        elif name in CHOICES:
            raw = _text(form, key)
            values[name] = raw if is_choice(name, raw) else ""
        else:
            values[name] = parse_number(_text(form, key)) or None
    return AcfFields(**values)


def parse_previous_acf(form: Mapping) -> AcfFields | None:
    """Pricing state rendered with the form, or None when the form has none."""
    if not any(key.startswith(PREVIOUS_PREFIX) for key in form.keys()):
        return None
    return parse_acf_form(form, prefix=PREVIOUS_PREFIX)


def build_product_payload(form: Mapping, existing_meta: list[dict] | None = None) -> tuple[dict, AcfFields]:
    """Full payload for POST/PUT products plus the recomputed fields.

    Raises:
        FormError: See parse_product_form
    """
    payload = parse_product_form(form)
    acf = recompute(parse_acf_form(form), parse_previous_acf(form))
    payload["meta_data"] = merge_meta_data(existing_meta, acf)
    return payload, acf


def product_from_form(form: Mapping) -> dict:
    """Best-effort product dict for re-rendering an invalid form."""
    image_url = _text(form, "image_url")
    return {
        "name": form.get("name") or "",
        "type": form.get("type") or "simple",
        "status": form.get("status") or "draft",
        "regular_price": form.get("regular_price") or "",
        "sale_price": form.get("sale_price") or "",
        "description": form.get("description") or "",
        "short_description": form.get("short_description") or "",
        "sku": form.get("sku") or "",
        "stock_quantity": form.get("stock_quantity") or None,
        "manage_stock": _checked(form, "manage_stock"),
        "images": [{"src": image_url}] if image_url else [],
        "categories": [{"id": int(raw)} for raw in _getall(form, "categories") if str(raw).isdigit()],
        "attributes": parse_attributes(form),
    }
