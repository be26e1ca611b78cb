"""Tests for product form parsing."""

import pytest
from multidict import MultiDict

from shopadmin.forms import (
    FormError,
    build_product_payload,
    parse_acf_form,
    parse_attributes,
    parse_previous_acf,
    parse_product_form,
    product_from_form,
)


def _form(*pairs):
    return MultiDict(pairs)


def test_parse_product_form_full():
    form = _form(
        ("name", "  Sac Lou "),
        ("type", "simple"),
        ("status", "publish"),
        ("regular_price", "120,50"),
        ("sale_price", ""),
        ("sku", "SAC-LOU"),
        ("stock_quantity", "3"),
        ("manage_stock", "1"),
        ("description", "<p>Cuir</p>"),
        ("image_url", "https://cdn.example.com/sac.jpg"),
        ("categories", "5"),
        ("categories", "7"),
    )

    product = parse_product_form(form)

    assert product["name"] == "Sac Lou"
    assert product["status"] == "publish"
    assert product["regular_price"] == "120.50"
    assert product["sale_price"] == ""
    assert product["sku"] == "SAC-LOU"
    assert product["stock_quantity"] == 3
    assert product["manage_stock"] is True
    assert product["description"] == "<p>Cuir</p>"
    assert product["images"] == [{"src": "https://cdn.example.com/sac.jpg"}]
    assert product["categories"] == [{"id": 5}, {"id": 7}]
    assert product["attributes"] == []


def test_parse_product_form_defaults():
    product = parse_product_form(_form(("name", "Pochette")))

    assert product["type"] == "simple"
    assert product["status"] == "draft"
    assert product["stock_quantity"] is None
    assert product["manage_stock"] is False
    assert product["images"] == []


def test_parse_product_form_collects_errors():
    form = _form(
        ("name", " "),
        ("regular_price", "-3"),
        ("sale_price", "abc"),
        ("stock_quantity", "2.5"),
        ("status", "archived"),
    )

    with pytest.raises(FormError) as exc_info:
        parse_product_form(form)

    errors = exc_info.value.errors
    assert errors["name"] == "Le nom du produit est obligatoire."
    assert errors["regular_price"] == "Prix invalide."
    assert errors["sale_price"] == "Prix invalide."
    assert errors["stock_quantity"] == "La quantité doit être un nombre entier."
    assert "status" in errors


@pytest.mark.parametrize("raw", ["12abc", "1e400", "1e3", "12.", "inf", "12.5.1"])
def test_price_must_be_a_plain_decimal(raw):
    form = _form(("name", "Sac"), ("regular_price", raw), ("sale_price", raw))

    with pytest.raises(FormError) as exc_info:
        parse_product_form(form)

    assert exc_info.value.errors == {"regular_price": "Prix invalide.", "sale_price": "Prix invalide."}


def test_parse_attributes_global_and_custom():
    form = _form(
        ("attr-1-name", "Matière"),
        ("attr-1-options", "Cuir, Toile, ,Cuir"),
        ("attr-1-variation", "1"),
        ("attr-0-name", "Couleur"),
        ("attr-0-id", "1"),
        ("attr-0-terms", "Rouge"),
        ("attr-0-terms", "Bleu"),
        ("attr-0-terms", "Rouge"),
        ("attr-0-visible", "1"),
        ("attr-2-name", ""),
    )

    attributes = parse_attributes(form)

    assert attributes == [
        {"name": "Couleur", "id": 1, "position": 0, "visible": True, "variation": False, "options": ["Rouge", "Bleu"]},
        {"name": "Matière", "position": 1, "visible": False, "variation": True, "options": ["Cuir", "Toile"]},
    ]


def test_parse_attributes_keeps_posted_position():
    form = _form(("attr-0-name", "Taille"), ("attr-0-options", "S"), ("attr-0-position", "4"))

    assert parse_attributes(form)[0]["position"] == 4


def test_parse_acf_form():
    form = _form(
        ("prix_achat", "10,5"),
        ("cout_logisitique", ""),
        ("marges", "1"),
        ("kchain", "0"),
        ("cas", "SUPER BEST"),
        ("taille_dust_bag", "xxl"),
        ("visuels", "lifestyle"),
    )

    acf = parse_acf_form(form)

    assert acf.prix_achat == 10.5
    assert acf.cout_logisitique is None
    assert acf.marges is True
    assert acf.kchain is False
    assert acf.site_internet is False
    assert acf.cas == "SUPER BEST"
    assert acf.taille_dust_bag == ""
    assert acf.visuels == "lifestyle"


def test_previous_acf_absent_without_hidden_inputs():
    assert parse_previous_acf(_form(("prix_achat", "10"))) is None


def test_previous_acf_read_from_hidden_inputs():
    previous = parse_previous_acf(_form(
        ("previous_prix_achat", "10"),
        ("previous_cout_logisitique", "5"),
        ("previous_marges", "0"),
    ))

    assert previous.prix_achat == 10
    assert previous.cout_logisitique == 5
    assert previous.marges is False


def test_build_payload_merges_meta_and_applies_margins():
    form = _form(
        ("name", "Sac Lou"),
        ("prix_achat", "10"),
        ("cout_logisitique", "5"),
        ("marges", "1"),
        ("previous_prix_achat", "10"),
        ("previous_cout_logisitique", "5"),
        ("previous_marges", "0"),
    )
    existing = [{"id": 3, "key": "_wc_rating", "value": "5"}]

    payload, acf = build_product_payload(form, existing)

    assert acf.prix_achat_total == 15
    assert acf.prix_cession_zalando == 30
    meta = {m["key"]: m["value"] for m in payload["meta_data"]}
    assert meta["_wc_rating"] == "5"
    assert meta["prix_achat_total"] == "15"
    assert meta["prix_cession_vp"] == "30"
    assert meta["marges"] == "1"
    assert "id" not in payload


def test_product_from_form_tolerates_invalid_input():
    product = product_from_form(_form(("name", ""), ("stock_quantity", "abc"), ("categories", "x")))

    assert product["name"] == ""
    assert product["stock_quantity"] == "abc"
    assert product["categories"] == []
