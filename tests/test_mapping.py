"""Tests for the mapping table."""

import json
from pathlib import Path

import pytest

from network_branding.domain.mapping import (
    ArtifactSet,
    MappingTable,
    load_mapping_table,
)
from network_branding.errors import MappingError


def test_resolve_is_exact_and_case_sensitive(mapping: MappingTable) -> None:
    assert mapping.resolve("Corp-Wired").background == "/wallpapers/corp_wired.png"
    assert mapping.resolve("corp-wired") == mapping.fallback
    assert mapping.resolve("Home Wi-Fi").background == "/wallpapers/home_wi-fi.png"


def test_resolve_missing_name_uses_fallback(mapping: MappingTable) -> None:
    assert mapping.resolve(None) == mapping.fallback
    assert mapping.resolve("HomeWifi") == mapping.fallback
    assert mapping.is_mapped("HomeWifi") is False


def test_background_uri_adds_file_scheme_once() -> None:
    assert ArtifactSet(background="/a b.png").background_uri == "file:///a b.png"
    assert (
        ArtifactSet(background="file:///a.png").background_uri == "file:///a.png"
    )


def test_mapping_is_immutable(mapping: MappingTable) -> None:
    with pytest.raises(Exception):  # noqa: B017
        mapping.fallback = ArtifactSet(background="/other.png")  # type: ignore[misc]


def test_load_mapping_table(tmp_path: Path) -> None:
    path = tmp_path / "mapping.json"
    path.write_text(
        json.dumps(
            {
                "connections": {"Corp-Wired": {"background": "/corp.png"}},
                "fallback": {"background": "/gray.png", "badge": "/gray_logo.png"},
            }
        ),
        encoding="utf-8",
    )

    table = load_mapping_table(path)

    assert table.resolve("Corp-Wired").background == "/corp.png"
    assert table.fallback.badge == "/gray_logo.png"


def test_load_mapping_table_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MappingError):
        load_mapping_table(tmp_path / "absent.json")


@pytest.mark.parametrize(
    "payload",
    [
        "{}",
        '{"fallback": {"background": ""}}',
        '{"fallback": {"background": "/x.png"}, "extra": 1}',
        "not json",
    ],
)
def test_load_mapping_table_invalid(tmp_path: Path, payload: str) -> None:
    path = tmp_path / "mapping.json"
    path.write_text(payload, encoding="utf-8")

    with pytest.raises(MappingError):
        load_mapping_table(path)
