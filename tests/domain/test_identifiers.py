from __future__ import annotations

import re

import pytest

from plmsync.domain.identifiers import sanitize_identifier

SAFE_NAME = re.compile(r"^[a-z0-9_]*$")

CASES = [
    ("Weight (GSM)", "weight_gsm"),
    ("brand_1", "brand_1"),
    ("  Fiber--Content  ", "fiber_content"),
    ("Pantone Code", "pantone_code"),
    ("Lead Time (Days) / Bulk", "lead_time_days_bulk"),
    ("__private__", "private"),
    ("Lead\tTime\n", "lead_time"),
    ("", ""),
    ("%%%", ""),
    ("___", ""),
    (" - / ", ""),
    ("Größe", "gr_e"),
    ("Ünit Cost €", "nit_cost"),
    ("色番号", ""),
    ("2nd Color", "2nd_color"),
    ("100% Cotton", "100_cotton"),
    ("42", "42"),
]


@pytest.mark.parametrize(("name", "expected"), CASES)
def test_sanitize_identifier_maps_onto_safe_names(name: str, expected: str) -> None:
    assert sanitize_identifier(name) == expected


@pytest.mark.parametrize("name", [name for name, _ in CASES])
def test_sanitized_names_only_use_safe_characters(name: str) -> None:
    sanitized = sanitize_identifier(name)

    assert SAFE_NAME.match(sanitized)
    assert "__" not in sanitized
    assert not sanitized.startswith("_")
    assert not sanitized.endswith("_")


@pytest.mark.parametrize("name", [name for name, _ in CASES])
def test_sanitize_identifier_is_idempotent(name: str) -> None:
    once = sanitize_identifier(name)

    assert sanitize_identifier(once) == once
