"""Unit tests for cross-provider series merging."""

from datetime import UTC, datetime

import pytest

from src.catalog.merger import (
    SeriesMerger,
    accumulated_provenance,
    filter_studio_genres,
    fresh_provenance,
    standalone_entry,
)
from src.catalog.quality import metadata_score
from src.catalog.schemas import RatingEntry, RatingType, SeriesRecord


def _make_record(**overrides) -> SeriesRecord:
    base = {"id": "hmm-foo", "name": "Foo"}
    base.update(overrides)
    return SeriesRecord.model_validate(base)


@pytest.fixture
def merger() -> SeriesMerger:
    return SeriesMerger()


# -------------------------------------------------------------------------
# Field helpers
# -------------------------------------------------------------------------


class TestStandaloneEntry:
    @staticmethod
    def test_direct_rating() -> None:
        entry = standalone_entry(_make_record(rating=8.6))
        assert entry == RatingEntry(raw=8.6, type=RatingType.DIRECT)

    @staticmethod
    def test_rating_type_kept() -> None:
        entry = standalone_entry(_make_record(rating=85, rating_type="percentage"))
        assert entry.type is RatingType.PERCENTAGE

    @staticmethod
    def test_view_count() -> None:
        entry = standalone_entry(_make_record(view_count=5000))
        assert entry == RatingEntry(raw=5000, type=RatingType.VIEWS)

    @staticmethod
    def test_rating_wins_over_views() -> None:
        entry = standalone_entry(_make_record(rating=7.0, view_count=5000))
        assert entry.type is RatingType.DIRECT

    @staticmethod
    def test_unrated() -> None:
        assert standalone_entry(_make_record()) is None


class TestFreshProvenance:
    @staticmethod
    def test_derived_from_id() -> None:
        provenance = fresh_provenance(_make_record(id="hse-foo-anime", view_count=5000))

        assert provenance.providers == ("hse",)
        assert provenance.slugs == {"hse": "foo-anime"}
        assert provenance.breakdown == {"hse": RatingEntry(raw=5000, type=RatingType.VIEWS)}

    @staticmethod
    def test_carried_providers_ignored() -> None:
        record = _make_record(rating=8.6, providers=["hmm"])
        provenance = fresh_provenance(record)

        assert provenance.providers == ("hmm",)
        assert provenance.breakdown["hmm"].raw == 8.6

    @staticmethod
    def test_foreign_fields_dropped() -> None:
        record = _make_record(
            providers=["hse"],
            provider_slugs={"hse": "other"},
            rating_breakdown={"hse": {"raw": 9.0}},
        )
        provenance = fresh_provenance(record)

        assert provenance.providers == ("hmm",)
        assert provenance.slugs == {"hmm": "foo"}
        assert provenance.breakdown == {}

    @staticmethod
    def test_own_prefix_entry_kept() -> None:
        record = _make_record(rating=3.0, rating_breakdown={"hmm": {"raw": 9.0}})
        assert fresh_provenance(record).breakdown["hmm"].raw == 9.0

    @staticmethod
    def test_accumulated_taken_as_built() -> None:
        record = _make_record(
            providers=["hmm", "hse"],
            provider_slugs={"hmm": "foo", "hse": "foo-anime"},
            rating=6.0,
        )
        provenance = accumulated_provenance(record)

        assert provenance.providers == ("hmm", "hse")
        assert provenance.slugs == {"hmm": "foo", "hse": "foo-anime"}
        assert provenance.breakdown == {}


class TestFilterStudioGenres:
    @staticmethod
    def test_studio_removed_case_insensitive() -> None:
        assert filter_studio_genres(["Romance", "studiox"], "StudioX") == ("Romance",)

    @staticmethod
    def test_duplicates_removed() -> None:
        assert filter_studio_genres(["A", "B", "A"], None) == ("A", "B")


# -------------------------------------------------------------------------
# Merge
# -------------------------------------------------------------------------


class TestPrimarySelection:
    @staticmethod
    def test_richer_incoming_becomes_primary(merger: SeriesMerger) -> None:
        existing = _make_record(id="hmm-foo")
        incoming = _make_record(id="hse-foo", year=2020, genres=["Drama"])

        merged = merger.merge(existing, incoming)

        assert merged.id == "hse-foo"
        assert merged.providers == ("hse", "hmm")
        assert merger.stats.primary_swaps == 1

    @staticmethod
    def test_tie_keeps_existing(merger: SeriesMerger) -> None:
        existing = _make_record(id="hmm-foo")
        incoming = _make_record(id="hse-foo-anime", name="Foo!")

        merged = merger.merge(existing, incoming)

        assert merged.id == "hmm-foo"
        assert merged.name == "Foo"
        assert merger.stats.primary_swaps == 0


class TestProvenance:
    @staticmethod
    def test_providers_and_slugs(merger: SeriesMerger) -> None:
        merged = merger.merge(_make_record(id="hmm-foo"), _make_record(id="hse-foo-anime"))

        assert merged.providers == ("hmm", "hse")
        assert merged.provider_slugs == {"hmm": "foo", "hse": "foo-anime"}

    @staticmethod
    def test_existing_slug_not_overwritten(merger: SeriesMerger) -> None:
        existing = _make_record(id="hmm-foo", providers=["hmm"], provider_slugs={"hmm": "foo"})
        incoming = _make_record(id="hmm-foo-2")

        merged = merger.merge(existing, incoming, existing_accumulated=True)

        assert merged.providers == ("hmm",)
        assert merged.provider_slugs == {"hmm": "foo"}

    @staticmethod
    def test_incoming_aggregation_fields_ignored(merger: SeriesMerger) -> None:
        existing = _make_record(
            id="hmm-foo",
            providers=["hmm"],
            provider_slugs={"hmm": "foo"},
            rating=8.6,
            rating_breakdown={"hmm": {"raw": 8.6}},
        )
        incoming = _make_record(
            id="hse-foo",
            providers=["htv", "hse"],
            provider_slugs={"htv": "bar"},
            view_count=5000,
            rating_breakdown={"htv": {"raw": 1.0}},
        )

        merged = merger.merge(existing, incoming, existing_accumulated=True)

        assert merged.providers == ("hmm", "hse")
        assert merged.provider_slugs == {"hmm": "foo", "hse": "foo"}
        assert set(merged.rating_breakdown) == {"hmm", "hse"}
        assert merged.rating == 8.1

    @staticmethod
    def test_unflagged_existing_read_as_fresh(merger: SeriesMerger) -> None:
        existing = _make_record(id="hmm-foo", providers=["htv"], rating=8.6)
        incoming = _make_record(id="hse-foo", view_count=5000)

        merged = merger.merge(existing, incoming)

        assert merged.providers == ("hmm", "hse")
        assert merged.rating == 8.1


class TestRatingMerge:
    @staticmethod
    def test_standalone_ratings_pooled(merger: SeriesMerger) -> None:
        existing = _make_record(id="hmm-foo", rating=8.6)
        incoming = _make_record(id="hse-foo", view_count=5000)

        merged = merger.merge(existing, incoming)

        assert set(merged.rating_breakdown) == {"hmm", "hse"}
        assert merged.rating_breakdown["hse"].type is RatingType.VIEWS
        assert merged.rating == 8.1

    @staticmethod
    def test_rating_recomputed_from_breakdown(merger: SeriesMerger) -> None:
        existing = _make_record(id="hmm-foo", rating=8.6)
        incoming = _make_record(id="htv-foo", rating=70, rating_type="percentage")

        merged = merger.merge(existing, incoming)

        assert merged.rating == merger.normalizer.weighted_average(merged.rating_breakdown)

    @staticmethod
    def test_derived_rating_not_captured(merger: SeriesMerger) -> None:
        existing = _make_record(id="hmm-foo", providers=["hmm"], rating=6.0)
        incoming = _make_record(id="hse-foo", view_count=5000)

        merged = merger.merge(existing, incoming, existing_accumulated=True)

        assert "hmm" not in merged.rating_breakdown
        assert merged.rating == 5.5

    @staticmethod
    def test_primary_wins_breakdown_collision(merger: SeriesMerger) -> None:
        existing = _make_record(
            id="hmm-foo",
            providers=["hmm"],
            rating=9.0,
            rating_breakdown={"hmm": {"raw": 9.0, "type": "direct"}},
        )
        incoming = _make_record(id="hmm-foo-alt", rating=3.0)

        merged = merger.merge(existing, incoming, existing_accumulated=True)

        assert merged.rating_breakdown["hmm"].raw == 9.0
        assert merged.rating == 9.0

    @staticmethod
    def test_unrated_pair_gets_default(merger: SeriesMerger) -> None:
        merged = merger.merge(_make_record(id="hmm-foo"), _make_record(id="hse-foo"))
        assert merged.rating_breakdown == {}
        assert merged.rating == 6.0


class TestDisplayFields:
    @staticmethod
    def test_poster_fallback(merger: SeriesMerger) -> None:
        incoming = _make_record(id="hse-foo", poster="p.jpg")
        assert merger.merge(_make_record(), incoming).poster == "p.jpg"

    @staticmethod
    def test_primary_poster_kept(merger: SeriesMerger) -> None:
        existing = _make_record(poster="a.jpg")
        incoming = _make_record(id="hse-foo", poster="b.jpg")
        assert merger.merge(existing, incoming).poster == "a.jpg"

    @staticmethod
    def test_longer_description_wins(merger: SeriesMerger) -> None:
        existing = _make_record(description="Short.")
        incoming = _make_record(id="hse-foo", description="A bit longer text.")
        assert merger.merge(existing, incoming).description == "A bit longer text."

    @staticmethod
    def test_primary_description_kept_when_longer(merger: SeriesMerger) -> None:
        existing = _make_record(description="A bit longer text.")
        incoming = _make_record(id="hse-foo", description="Short.")
        assert merger.merge(existing, incoming).description == "A bit longer text."

    @staticmethod
    def test_description_fallback(merger: SeriesMerger) -> None:
        incoming = _make_record(id="hse-foo", description="Short.")
        assert merger.merge(_make_record(), incoming).description == "Short."

    @staticmethod
    @pytest.mark.parametrize(
        ("primary", "secondary", "expected"),
        [
            ("STUDIO PIERROT", "Studio Pierrot", "Studio Pierrot"),
            ("Studio Pierrot", "STUDIO PIERROT", "Studio Pierrot"),
            ("STUDIO PIERROT", "MAPPA", "STUDIO PIERROT"),
            (None, "MAPPA", "MAPPA"),
        ],
    )
    def test_studio(merger: SeriesMerger, primary, secondary, expected) -> None:
        existing = _make_record(studio=primary)
        incoming = _make_record(id="hse-foo", studio=secondary)
        assert merger.merge(existing, incoming).studio == expected

    @staticmethod
    def test_genres_union_without_studio(merger: SeriesMerger) -> None:
        existing = _make_record(genres=["Romance", "Comedy"], studio="StudioX")
        incoming = _make_record(id="hse-foo", genres=["Drama", "studiox"])

        merged = merger.merge(existing, incoming)

        assert merged.genres == ("Romance", "Comedy", "Drama")

    @staticmethod
    def test_year_fallback(merger: SeriesMerger) -> None:
        incoming = _make_record(id="hse-foo", year=2019)
        assert merger.merge(_make_record(), incoming).year == 2019

    @staticmethod
    def test_most_recent_update(merger: SeriesMerger) -> None:
        existing = _make_record(last_updated="2024-01-01")
        incoming = _make_record(id="hse-foo", last_updated="2024-06-01T10:00:00Z")

        merged = merger.merge(existing, incoming)

        assert merged.last_updated == datetime(2024, 6, 1, 10, tzinfo=UTC)

    @staticmethod
    def test_update_fallback(merger: SeriesMerger) -> None:
        incoming = _make_record(id="hse-foo", last_updated="2024-01-01")
        assert merger.merge(_make_record(), incoming).last_updated is not None


class TestMergeInvariants:
    @staticmethod
    def test_score_recomputed(merger: SeriesMerger) -> None:
        existing = _make_record(genres=["Romance"], rating=8.6)
        incoming = _make_record(id="hse-foo", genres=["Drama"], year=2020, poster="p" * 20)

        merged = merger.merge(existing, incoming)

        assert merged.metadata_score == metadata_score(merged)
        assert merged.metadata_score >= max(metadata_score(existing), metadata_score(incoming))

    @staticmethod
    def test_inputs_unchanged(merger: SeriesMerger) -> None:
        existing = _make_record(rating=8.6, genres=["Romance"])
        incoming = _make_record(id="hse-foo", view_count=5000, genres=["Drama"])

        merger.merge(existing, incoming)

        assert existing.providers == ()
        assert existing.rating_breakdown == {}
        assert existing.genres == ("Romance",)
        assert incoming.providers == ()

    @staticmethod
    def test_idempotent_remerge(merger: SeriesMerger) -> None:
        first = _make_record(rating=8.6, genres=["Romance"])
        second = _make_record(id="hse-foo", view_count=5000, genres=["Drama"])

        once = merger.merge(first, second)
        twice = merger.merge(once, second, existing_accumulated=True)

        assert twice.rating == once.rating == 8.1
        assert set(twice.genres) == set(once.genres)
        assert twice.providers == once.providers

    @staticmethod
    def test_stats(merger: SeriesMerger) -> None:
        merger.merge(_make_record(), _make_record(id="hse-foo"))
        merger.merge(_make_record(), _make_record(id="htv-foo"))
        assert merger.stats.merges == 2

        merger.reset()
        assert merger.stats.merges == 0
