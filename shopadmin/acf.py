"""
ShopAdmin custom product fields (ACF)

Pricing and tagging data that the store keeps as product meta_data
key/value pairs. Values travel as strings; on read they are coerced back
to numbers, booleans and known choices.

Derived prices:
    prix_achat_total = prix_achat + cout_logisitique        (2 decimals)
    cession prices   = 2 × prix_achat_total                 (when marges is on)
"""

import re
from dataclasses import dataclass, fields, replace
from typing import Any

TAILLE_DUST_BAG_OPTIONS = [
    ("s", "S"),
    ("m", "M"),
    ("l", "L"),
    ("xl", "XL"),
]

VISUELS_OPTIONS = [
    ("fond-blanc", "FOND BLANC"),
    ("lifestyle", "LIFESTYLE"),
    ("fb-lifestyle", "FOND BLANC ET LIFESTYLE"),
]

CAS_OPTIONS = [
    (value, value)
    for value in (
        "BEST",
        "OK",
        "SUPER BEST",
        "CAS",
        "BEST WW",
        "STAND BY X AVRIL",
        "NEW NO SALES",
        "TEST",
        "NEW",
        "BAISSE PRIX X NOV",
        "STOP",
    )
]

CHOICES = {
    "cas": CAS_OPTIONS,
    "taille_dust_bag": TAILLE_DUST_BAG_OPTIONS,
    "visuels": VISUELS_OPTIONS,
}

NUMBER_FIELDS = (
    "prix_achat",
    "cout_logisitique",
    "prix_achat_total",
    "prix_vente_publique",
    "prix_cession_vp",
    "prix_site",
    "prix_cession_srp",
    "prix_cession_bradery",
    "prix_cession_zalando",
)

BOOL_FIELDS = ("marges", "site_internet", "kchain")

# Filled from the total purchase price when marges is on
AUTO_MARGIN_FIELDS = (
    "prix_cession_vp",
    "prix_site",
    "prix_cession_srp",
    "prix_cession_bradery",
    "prix_cession_zalando",
)

MARGIN_FACTOR = 2
BELOW_COST_TOLERANCE = 0.005

_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse_number(value: Any) -> float | None:
    """Lenient numeric coercion: leading number of a string, else None.

    "12.5" → 12.5, "12,5" → 12.5, "7 €" → 7.0, "" → None, "abc" → None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).replace(",", ".")
    match = _NUMBER_PREFIX.match(text)
    if not match:
        return None
    return float(match.group(0))


def parse_bool(value: Any) -> bool:
    return value is True or value == "1"


def format_number(value: float | None) -> str:
    """Serialize a price for meta_data, to the cent, without trailing zeros.

    Empty and zero both serialize as "", since zero reads back as empty.
    """
    if value is None or round(value, 2) == 0:
        return ""
    text = f"{round(value, 2):.2f}"
    return text.rstrip("0").rstrip(".")


def total_purchase_price(prix_achat: float | None, cout_logisitique: float | None) -> float:
    """Purchase price plus logistics cost, rounded to 2 decimals."""
    return round((prix_achat or 0) + (cout_logisitique or 0), 2)


def cession_price(total: float | None) -> float:
    return round((total or 0) * MARGIN_FACTOR, 2)


@dataclass
class AcfFields:
    """Custom fields of one product. None means the field is empty."""
    prix_achat: float | None = None
    cout_logisitique: float | None = None
    prix_achat_total: float | None = None
    prix_vente_publique: float | None = None
    marges: bool = False
    prix_cession_vp: float | None = None
    prix_site: float | None = None
    prix_cession_srp: float | None = None
    prix_cession_bradery: float | None = None
    prix_cession_zalando: float | None = None
    cas: str = ""
    site_internet: bool = False
    kchain: bool = False
    taille_dust_bag: str = ""
    visuels: str = ""

    @classmethod
    def keys(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_meta_data(cls, meta_data: list[dict] | None) -> "AcfFields":
        """Decode the managed keys of a product's meta_data.

        Zero and unparsable numbers read back as empty, booleans are true
        only for "1" / True, and choices outside the known options are
        dropped. The total is recomputed from its two inputs.
        """
        values: dict[str, Any] = {}
        for meta in meta_data or []:
            key = meta.get("key")
            value = meta.get("value")
            if key in NUMBER_FIELDS:
                values[key] = parse_number(value) or None
            elif key in BOOL_FIELDS:
                values[key] = parse_bool(value)
            elif key in CHOICES:
                values[key] = value if is_choice(key, value) else ""

        acf = cls(**values)
        acf.prix_achat_total = total_purchase_price(acf.prix_achat, acf.cout_logisitique)
        return acf

    def to_meta_data(self) -> list[dict]:
        """Serialize every field as a string-valued meta_data entry."""
        entries = []
        for name in self.keys():
            value = getattr(self, name)
            if name in NUMBER_FIELDS:
                value = format_number(value)
            elif name in BOOL_FIELDS:
                value = "1" if value else "0"
            else:
                value = value or ""
            entries.append({"key": name, "value": value})
        return entries


def is_choice(field_name: str, value: Any) -> bool:
    return any(option == value for option, _ in CHOICES.get(field_name, ()))


def merge_meta_data(existing: list[dict] | None, acf: AcfFields) -> list[dict]:
    """Replace the managed ACF entries of a meta_data list, keep the rest."""
    managed = set(AcfFields.keys())
    kept = [meta for meta in existing or [] if meta.get("key") not in managed]
    return kept + acf.to_meta_data()


def recompute(current: AcfFields, previous: AcfFields | None = None) -> AcfFields:
    """Apply the derived-price rules to an edited set of fields.

    Args:
        current: Fields as the user just left them
        previous: Fields before the edit (None on first render)

    Returns:
        A new AcfFields with prix_achat_total and, depending on the
        marges transition, the auto-margin prices updated.
    """
    total = total_purchase_price(current.prix_achat, current.cout_logisitique)
    result = replace(current, prix_achat_total=total)

    was_on = previous.marges if previous is not None else current.marges
    previous_total = (
        total_purchase_price(previous.prix_achat, previous.cout_logisitique)
        if previous is not None else total
    )

    if current.marges and not was_on:
        updates = {name: cession_price(total) for name in AUTO_MARGIN_FIELDS}
    elif was_on and not current.marges:
        updates = {name: None for name in AUTO_MARGIN_FIELDS}
    elif current.marges and total != previous_total:
        updates = {name: cession_price(total) for name in AUTO_MARGIN_FIELDS}
    else:
        updates = {}

    return replace(result, **updates)


def below_cost_fields(acf: AcfFields) -> set[str]:
    """Manually priced fields that sell under the total purchase price."""
    if acf.marges:
        return set()
    total = acf.prix_achat_total or 0
    return {
        name for name in AUTO_MARGIN_FIELDS
        if (getattr(acf, name) or 0) < total - BELOW_COST_TOLERANCE
    }
