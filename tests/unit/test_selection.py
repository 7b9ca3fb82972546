from __future__ import annotations

from src.index import IndexedAssetSummary
from src.ingestion import (
    IndexKeys,
    build_index_keys,
    dedupe_entries,
    dedupe_slugs,
    exclude_checkpointed,
    exclude_indexed,
    filter_by_tag,
    normalize_title,
    select_candidates,
)
from src.ingestion.selection import tag_keywords
from tests.fakes import BASE_URL, make_entry

TAG = "2026-super-bowl-lx-commercials"


def test_normalize_title_strips_punctuation_and_whitespace() -> None:
    assert normalize_title("  Hellmann's:  Meal   Diamond! ") == "hellmanns meal diamond"
    assert normalize_title("") == ""


def test_normalize_title_is_idempotent() -> None:
    titles = ["Nike: Just Do It - Super Bowl LX", "Coca-Cola  &  Friends", "ÉTÉ 2026 ★"]
    for title in titles:
        once = normalize_title(title)
        assert normalize_title(once) == once


def test_tag_keywords_drop_short_numeric_and_stopwords() -> None:
    assert tag_keywords(TAG) == ["super", "bowl"]
    assert tag_keywords("the-and-for") == []


def test_filter_by_tag_matches_two_keywords() -> None:
    budweiser = make_entry("Budweiser Super Bowl Commercial", slug="budweiser-ad")
    random_ad = make_entry("Random Tech Ad", slug="random-tech-ad")

    assert filter_by_tag([budweiser, random_ad], TAG) == [budweiser]


def test_filter_by_tag_counts_hits_in_slug() -> None:
    entry = make_entry("Doritos: Dance", slug="doritos-super-bowl-2026")

    assert filter_by_tag([entry], TAG) == [entry]


def test_filter_by_tag_single_hit_is_not_enough_for_two_keywords() -> None:
    entry = make_entry("Bowl of soup", slug="soup")

    assert filter_by_tag([entry], TAG) == []


def test_filter_by_tag_single_keyword_needs_one_hit() -> None:
    entry = make_entry("Olympics opener", slug="olympics-opener")

    assert filter_by_tag([entry], "2026-olympics-ads") == [entry]


def test_filter_by_tag_without_keywords_keeps_everything() -> None:
    entries = [make_entry("A"), make_entry("B")]

    assert filter_by_tag(entries, "lx-ad") == entries


def test_dedupe_keeps_shortest_slug_in_first_position() -> None:
    first = make_entry("Nike: Winner", slug="nike-winner-20262")
    other = make_entry("Pepsi: Cola", slug="pepsi-cola")
    repost = make_entry("NIKE - winner", slug="nike-winner")

    unique = dedupe_entries([first, other, repost])

    assert unique == [repost, other]


def test_dedupe_output_has_unique_normalized_titles() -> None:
    entries = [
        make_entry("Ad One", slug="ad-one"),
        make_entry("ad one!", slug="ad-one-2"),
        make_entry("Ad Two", slug="ad-two"),
        make_entry("AD  TWO", slug="ad-two-22"),
    ]

    unique = dedupe_entries(entries)

    titles = [normalize_title(e.title) for e in unique]
    assert len(titles) == len(set(titles)) == 2
    assert [e.slug for e in unique] == ["ad-one", "ad-two"]


def test_dedupe_does_not_mutate_input() -> None:
    entries = [make_entry("Ad", slug="ad-2"), make_entry("Ad", slug="ad")]
    snapshot = list(entries)

    dedupe_entries(entries)

    assert entries == snapshot


def test_build_index_keys_uses_source_url_and_titles() -> None:
    assets = [
        IndexedAssetSummary(asset_id="v1", source_url=f"{BASE_URL}nike-winner", title="Nike: Winner"),
        IndexedAssetSummary(asset_id="v2", system_title="Pepsi Cola.mp4"),
    ]

    keys = build_index_keys(assets, BASE_URL)

    assert keys.slugs == frozenset({"nike-winner"})
    assert keys.titles == frozenset({"nike winner", "pepsi colamp4"})


def test_exclude_indexed_by_slug_or_title() -> None:
    by_slug = make_entry("Different Title", slug="nike-winner")
    by_title = make_entry("Pepsi: Cola!", slug="pepsi-new")
    fresh = make_entry("Doritos", slug="doritos")
    keys = IndexKeys(slugs=frozenset({"nike-winner"}), titles=frozenset({"pepsi cola"}))

    assert exclude_indexed([by_slug, by_title, fresh], keys) == [fresh]


def test_exclude_checkpointed() -> None:
    done = make_entry("Done", slug="done")
    todo = make_entry("Todo", slug="todo")

    assert exclude_checkpointed([done, todo], {"done"}) == [todo]


def test_select_candidates_chains_passes_and_limits() -> None:
    entries = [
        make_entry("Nike Super Bowl Spot", slug="nike-sb"),
        make_entry("Random Tech Ad", slug="random"),
        make_entry("Pepsi Super Bowl Spot", slug="pepsi-sb"),
        make_entry("Pepsi Super Bowl Spot", slug="pepsi-sb-2"),
        make_entry("Kia Super Bowl Spot", slug="kia-sb"),
        make_entry("Toyota Super Bowl Spot", slug="toyota-sb"),
    ]
    keys = IndexKeys(slugs=frozenset({"kia-sb"}))

    selection = select_candidates(entries, TAG, keys, {"nike-sb"}, limit=1)

    assert selection.total == 6
    assert selection.tagged == 5
    assert selection.unique == 4
    assert selection.new == 3
    assert [e.slug for e in selection.remaining] == ["pepsi-sb", "toyota-sb"]
    assert [e.slug for e in selection.to_process] == ["pepsi-sb"]


def test_select_candidates_skips_entries_without_slug() -> None:
    linkless = make_entry("Audi Super Bowl", slug="")
    linked = make_entry("BMW Super Bowl", slug="bmw-sb")

    selection = select_candidates([linkless, linked], TAG, IndexKeys(), set())

    assert selection.skipped == [linkless]
    assert selection.to_process == [linked]


def test_dedupe_slugs_keeps_first_entry_per_link() -> None:
    first = make_entry("Nike Super Bowl Spot", slug="nike-sb")
    retitled = make_entry("Nike Super Bowl Spot extended cut", slug="nike-sb")
    other = make_entry("Kia Super Bowl Spot", slug="kia-sb")

    assert dedupe_slugs([first, retitled, other]) == [first, other]


def test_select_candidates_collapses_retitled_reposts_of_one_link() -> None:
    entries = [
        make_entry("Nike Super Bowl Spot", slug="nike-sb"),
        make_entry("Nike Super Bowl Spot extended cut", slug="nike-sb"),
        make_entry("Kia Super Bowl Spot", slug="kia-sb"),
    ]

    selection = select_candidates(entries, TAG, IndexKeys(), set())

    assert [e.slug for e in selection.to_process] == ["nike-sb", "kia-sb"]
    assert selection.unique == 2
