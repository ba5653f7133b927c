"""
Unit tests for tidepool/core/interest/aggregator.py
"""

import random

import pytest

from tidepool.core.interest.aggregator import InterestAggregator, aggregate, normalize_tag
from tidepool.core.interest.sources import AgeRangeSource, StaticTagSource


class TestNormalizeTag:
    def test_folds_case_and_separators(self):
        assert normalize_tag("  Live-Music ", {}) == "live_music"
        assert normalize_tag("Hip Hop", {}) == "hip_hop"

    def test_applies_synonyms_after_folding(self, rulebook):
        assert normalize_tag("Coffee Shops", rulebook.synonyms) == "coffee"
        assert normalize_tag("restaurants", rulebook.synonyms) == "dining"


class TestAggregate:
    """Weighted, vocabulary-restricted merging."""

    def test_scales_by_source_weight(self, rulebook):
        result = aggregate(
            {"spotify": {"Jazz": 2}, "favorites": {"jazz": 1}},
            rulebook.source_weights,
            rulebook.vocabulary,
            rulebook.synonyms,
        )
        assert result == {"jazz": pytest.approx(2 * 0.9 + 1 * 1.0)}

    def test_drops_out_of_vocabulary_tags(self, rulebook):
        result = aggregate(
            {"photos": {"park": 1, "definitely_not_a_tag": 50}},
            rulebook.source_weights,
            rulebook.vocabulary,
        )
        assert set(result) == {"park"}

    def test_accepts_pairs_and_merges_synonyms(self, rulebook):
        result = aggregate(
            {"photos": [("park", 1), ("Parks", 2)]},
            rulebook.source_weights,
            rulebook.vocabulary,
            rulebook.synonyms,
        )
        assert result["park"] == pytest.approx(1.8)

    def test_unknown_source_uses_default_weight(self, rulebook, caplog):
        result = aggregate({"strava": {"fitness": 4}}, {}, rulebook.vocabulary, default_weight=0.5)
        assert result == {"fitness": 2.0}
        assert "strava" in caplog.text

    def test_negative_totals_kept(self, rulebook):
        result = aggregate(
            {"age_range": rulebook.age_brackets["under_18"], "favorites": {"nightlife": 3}},
            rulebook.source_weights,
            rulebook.vocabulary,
        )
        assert result["nightlife"] == pytest.approx(-7.0)
        assert result["family_friendly"] == pytest.approx(5.0)

    def test_keys_always_within_vocabulary(self, rulebook):
        rng = random.Random(3)
        pool = list(rulebook.vocabulary[:40]) + ["Coffee Shops", "nope", "X-Y", "parks", ""]
        vocab = set(rulebook.vocabulary)
        for _ in range(100):
            counts = {rng.choice(pool): rng.randint(-3, 5) for _ in range(10)}
            result = aggregate({"spotify": counts}, rulebook.source_weights,
                               rulebook.vocabulary, rulebook.synonyms)
            assert set(result) <= vocab


class TestInterestAggregator:
    """Source registry and collection."""

    def test_run_reports_active_sources(self, rulebook):
        aggregator = InterestAggregator(rulebook, [
            StaticTagSource("spotify", {"jazz": 3}),
            StaticTagSource("photos", {}),
            AgeRangeSource(rulebook),
        ])
        result = aggregator.run()
        assert result.active_sources == ["spotify"]
        assert result.total_sources == 3
        assert result.active_source_count == 1
        assert result.tag_weights == {"jazz": pytest.approx(2.7)}

    def test_duplicate_source_rejected(self, rulebook):
        aggregator = InterestAggregator(rulebook, [StaticTagSource("spotify")])
        with pytest.raises(ValueError):
            aggregator.add_source(StaticTagSource("spotify"))

    def test_remove_source(self, rulebook):
        aggregator = InterestAggregator(rulebook, [StaticTagSource("spotify")])
        assert aggregator.remove_source("spotify") is True
        assert aggregator.remove_source("spotify") is False
        assert aggregator.sources == []

    def test_failing_source_contributes_nothing(self, rulebook, caplog):
        class BrokenSource:
            name = "photos"

            def get_interest_tags(self):
                raise PermissionError("photo library access denied")

        aggregator = InterestAggregator(rulebook, [BrokenSource(), StaticTagSource("favorites", {"park": 2})])
        result = aggregator.run()
        assert result.tag_weights == {"park": 2.0}
        assert result.active_sources == ["favorites"]
        assert "photo library access denied" in caplog.text
