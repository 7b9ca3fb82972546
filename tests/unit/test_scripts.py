from __future__ import annotations

from scripts.delete_videos import delete_videos, select_by_batch_tag
from scripts.recategorize_videos import find_matches, recategorize
from src.index import IndexedAssetSummary
from tests.fakes import FakeIndexClient

ASSETS = [
    IndexedAssetSummary(
        asset_id="v1",
        title="Bud Light",
        user_metadata={"product_category": "Alcohol", "batch_tag": "sb-2026", "legacy": "x"},
    ),
    IndexedAssetSummary(asset_id="v2", user_metadata={"product_category": "Auto", "batch_tag": "sb-2025"}),
    IndexedAssetSummary(asset_id="v3", user_metadata={"product_category": "Alcohol", "batch_tag": "sb-2026"}),
]


def test_find_matches_exact_value() -> None:
    assert [a.asset_id for a in find_matches(ASSETS, "product_category", "Alcohol")] == ["v1", "v3"]
    assert find_matches(ASSETS, "product_category", "alcohol") == []


def test_recategorize_overwrites_full_metadata() -> None:
    client = FakeIndexClient()

    recategorize(client, ASSETS[0], "product_category", "Food & Beverage")

    assert client.updates["v1"] == {
        "product_category": "Food & Beverage",
        "batch_tag": "sb-2026",
        "legacy": "x",
    }


def test_recategorize_dry_run_sends_nothing() -> None:
    client = FakeIndexClient()

    payload = recategorize(client, ASSETS[2], "product_category", "Beverage", dry_run=True)

    assert payload["product_category"] == "Beverage"
    assert client.updates == {}


def test_select_by_batch_tag() -> None:
    assert select_by_batch_tag(ASSETS, "sb-2026") == ["v1", "v3"]


def test_delete_videos_continues_past_failures() -> None:
    client = FakeIndexClient()

    failed = delete_videos(client, ["v1", "missing", "v3"])

    assert failed == ["missing"]
    assert client.deleted == ["v1", "v3"]
