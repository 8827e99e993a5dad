"""Tests for the learning materials catalog."""

from __future__ import annotations

import pytest

from ges_annex.core.materials import MaterialsCatalog


def test_every_level_has_materials():
    catalog = MaterialsCatalog()

    for level in catalog.levels():
        assert catalog.list_materials(level)


def test_level_filter_is_case_insensitive():
    catalog = MaterialsCatalog()

    assert catalog.list_materials("jhs") == catalog.list_materials("JHS")
    assert {material.level for material in catalog.list_materials(" shs ")} == {"SHS"}


def test_unfiltered_listing_returns_everything():
    catalog = MaterialsCatalog()

    assert len(catalog.list_materials()) == sum(
        len(catalog.list_materials(level)) for level in catalog.levels()
    )


def test_unknown_level_raises():
    with pytest.raises(ValueError):
        MaterialsCatalog().list_materials("University")


def test_subjects_are_sorted_and_unique():
    subjects = MaterialsCatalog().subjects("JHS")

    assert subjects == sorted(set(subjects))
