"""Tests for the custom pricing fields and their derived prices."""

import pytest

from shopadmin.acf import (
    AUTO_MARGIN_FIELDS,
    AcfFields,
    below_cost_fields,
    format_number,
    merge_meta_data,
    parse_number,
    recompute,
    total_purchase_price,
)


@pytest.mark.parametrize("raw, expected", [
    ("12.5", 12.5),
    ("12,5", 12.5),
    ("7 €", 7.0),
    (".5", 0.5),
    (3, 3.0),
    ("", None),
    ("abc", None),
    (None, None),
    (True, None),
])
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


@pytest.mark.parametrize("value, expected", [
    (None, ""),
    (12.0, "12"),
    (10.5, "10.5"),
    (100.0, "100"),
    (0.0, ""),
    (0.004, ""),
    (10.556, "10.56"),
    (19.999, "20"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_total_purchase_price_rounds_to_cents():
    assert total_purchase_price(10.1, 0.2) == 10.3
    assert total_purchase_price(None, 5) == 5
    assert total_purchase_price(None, None) == 0


# =========================================================================
# META DATA
# =========================================================================


def test_decodes_managed_keys():
    acf = AcfFields.from_meta_data([
        {"id": 1, "key": "prix_achat", "value": "10"},
        {"id": 2, "key": "cout_logisitique", "value": "5"},
        {"id": 3, "key": "prix_achat_total", "value": "999"},
        {"id": 4, "key": "marges", "value": "1"},
        {"id": 5, "key": "kchain", "value": "0"},
        {"id": 6, "key": "cas", "value": "BEST"},
        {"id": 7, "key": "visuels", "value": "polaroid"},
        {"id": 8, "key": "prix_site", "value": "0"},
        {"id": 9, "key": "_yoast_wpseo_title", "value": "Sac"},
    ])

    assert acf.prix_achat == 10
    assert acf.cout_logisitique == 5
    assert acf.prix_achat_total == 15
    assert acf.marges is True
    assert acf.kchain is False
    assert acf.cas == "BEST"
    assert acf.visuels == ""
    assert acf.prix_site is None


def test_missing_meta_data_gives_empty_fields():
    acf = AcfFields.from_meta_data(None)

    assert acf.prix_achat is None
    assert acf.prix_achat_total == 0
    assert acf.marges is False
    assert acf.taille_dust_bag == ""


def test_serializes_every_field_as_string():
    entries = AcfFields(prix_achat=10.0, prix_achat_total=10.0, marges=True, taille_dust_bag="xl").to_meta_data()
    values = {e["key"]: e["value"] for e in entries}

    assert len(entries) == len(AcfFields.keys())
    assert values["prix_achat"] == "10"
    assert values["prix_site"] == ""
    assert values["marges"] == "1"
    assert values["kchain"] == "0"
    assert values["taille_dust_bag"] == "xl"
    assert values["cas"] == ""


def test_zero_total_serializes_as_empty():
    acf = recompute(AcfFields())
    values = {e["key"]: e["value"] for e in acf.to_meta_data()}

    assert acf.prix_achat_total == 0
    assert values["prix_achat_total"] == ""


def test_merge_keeps_foreign_entries():
    existing = [
        {"id": 1, "key": "_yoast_wpseo_title", "value": "Sac"},
        {"id": 2, "key": "prix_achat", "value": "3"},
    ]

    merged = merge_meta_data(existing, AcfFields(prix_achat=12.0))

    assert merged[0] == {"id": 1, "key": "_yoast_wpseo_title", "value": "Sac"}
    prix_achat = [m for m in merged if m["key"] == "prix_achat"]
    assert prix_achat == [{"key": "prix_achat", "value": "12"}]
    assert len(merged) == 1 + len(AcfFields.keys())


# =========================================================================
# RECOMPUTE
# =========================================================================


def test_total_always_recomputed():
    acf = recompute(AcfFields(prix_achat=10, cout_logisitique=5, prix_achat_total=1))

    assert acf.prix_achat_total == 15
    assert all(getattr(acf, name) is None for name in AUTO_MARGIN_FIELDS)


def test_turning_marges_on_fills_cession_prices():
    previous = AcfFields(prix_achat=10, cout_logisitique=5)
    current = AcfFields(prix_achat=10, cout_logisitique=5, marges=True)

    acf = recompute(current, previous)

    for name in AUTO_MARGIN_FIELDS:
        assert getattr(acf, name) == 30


def test_turning_marges_off_clears_cession_prices():
    previous = AcfFields(prix_achat=10, cout_logisitique=5, marges=True)
    current = AcfFields(
        prix_achat=10, cout_logisitique=5, marges=False,
        prix_cession_vp=30, prix_site=30, prix_cession_srp=30,
        prix_cession_bradery=30, prix_cession_zalando=30,
    )

    acf = recompute(current, previous)

    assert acf.prix_achat_total == 15
    for name in AUTO_MARGIN_FIELDS:
        assert getattr(acf, name) is None


def test_total_change_with_marges_on_updates_prices():
    previous = AcfFields(prix_achat=10, cout_logisitique=0, marges=True)
    current = AcfFields(prix_achat=10, cout_logisitique=2, marges=True, prix_site=20)

    acf = recompute(current, previous)

    assert acf.prix_achat_total == 12
    for name in AUTO_MARGIN_FIELDS:
        assert getattr(acf, name) == 24


def test_unchanged_total_leaves_prices_alone():
    previous = AcfFields(prix_achat=10, cout_logisitique=5, marges=True)
    current = AcfFields(prix_achat=10, cout_logisitique=5, marges=True, prix_site=31, prix_vente_publique=80)

    acf = recompute(current, previous)

    assert acf.prix_site == 31
    assert acf.prix_vente_publique == 80


def test_manual_prices_kept_with_marges_off():
    previous = AcfFields(prix_achat=10)
    current = AcfFields(prix_achat=12, prix_cession_srp=17.5)

    acf = recompute(current, previous)

    assert acf.prix_achat_total == 12
    assert acf.prix_cession_srp == 17.5


def test_pvp_never_derived():
    previous = AcfFields(prix_achat=10)
    current = AcfFields(prix_achat=10, marges=True)

    acf = recompute(current, previous)

    assert acf.prix_vente_publique is None


# =========================================================================
# BELOW COST
# =========================================================================


def test_flags_prices_under_total():
    acf = AcfFields(
        prix_achat_total=15,
        prix_cession_vp=30, prix_site=10, prix_cession_srp=15,
        prix_cession_bradery=14.999, prix_cession_zalando=None,
    )

    assert below_cost_fields(acf) == {"prix_site", "prix_cession_zalando"}


def test_nothing_flagged_with_marges_on():
    acf = AcfFields(prix_achat_total=15, marges=True)

    assert below_cost_fields(acf) == set()
