"""
Unit tests for tidepool/core/interest/sources.py
"""

import pytest

from tidepool.core.interest.sources import (
    AgeRangeSource,
    FavoritePlace,
    FavoritesSource,
    GenreTagSource,
    StaticTagSource,
    map_genre_to_tags,
)

DAY = 24 * 60 * 60


class TestFavorites:
    """Saved places -> weighted tags."""

    def test_interest_weight_components(self, clock):
        fresh = FavoritePlace("Seco", "cafe", rating=5, visit_count=10, created_at=clock())
        assert fresh.interest_weight(clock()) == pytest.approx(1.0)

        old = FavoritePlace("Old", "park", rating=3, visit_count=0, created_at=clock() - 90 * DAY)
        assert old.interest_weight(clock()) == pytest.approx(0.3 + 0.2 * 0.36787944, rel=1e-6)

    def test_category_and_rating_tags(self, rulebook, clock):
        place = FavoritePlace("Seco", "Cafe", rating=5, visit_count=10, tags=["Jazz"], created_at=clock())
        tags = FavoritesSource("favorites", rulebook, [place], clock=clock).get_interest_tags()
        for tag in ["coffee", "cafe", "social", "work", "casual", "highly_rated", "jazz"]:
            assert tags[tag] == 10

    def test_low_weight_place_still_counts_once(self, rulebook, clock):
        place = FavoritePlace("Meh", "park", rating=1, visit_count=0, created_at=clock() - 3650 * DAY)
        tags = FavoritesSource("favorites", rulebook, [place], clock=clock).get_interest_tags()
        assert tags["park"] == 1
        assert "highly_rated" not in tags

    def test_unknown_category_keeps_user_tags(self, rulebook, clock):
        place = FavoritePlace("Somewhere", "spaceport", tags=["outdoor"], created_at=clock())
        tags = FavoritesSource("favorites", rulebook, [place], clock=clock).get_interest_tags()
        assert set(tags) == {"outdoor"}


class TestAgeRange:
    """Signed filtering weights gated on authorisation."""

    def test_unauthorised_contributes_nothing(self, rulebook):
        assert AgeRangeSource(rulebook, "under_18").get_interest_tags() == {}

    def test_authorised_bracket(self, rulebook):
        tags = AgeRangeSource(rulebook, "under_18", authorized=True).get_interest_tags()
        assert tags["nightlife"] < 0
        assert tags["family_friendly"] > 0

    def test_unknown_bracket(self, rulebook, caplog):
        assert AgeRangeSource(rulebook, "unknown", authorized=True).get_interest_tags() == {}
        assert AgeRangeSource(rulebook, "99_plus", authorized=True).get_interest_tags() == {}
        assert "99_plus" in caplog.text


class TestGenreMapping:
    """Exact, partial and fallback genre matches."""

    def test_exact(self, rulebook):
        assert map_genre_to_tags("Indie Rock", rulebook.genres) == ["indie", "rock", "alternative"]

    def test_partial_prefers_longest_key(self, rulebook):
        assert map_genre_to_tags("swedish indie rock", rulebook.genres) == ["indie", "rock", "alternative"]

    def test_fallback(self, rulebook):
        assert map_genre_to_tags("Bossa-Nova", rulebook.genres) == ["bossa_nova", "music"]

    def test_empty(self, rulebook):
        assert map_genre_to_tags("   ", rulebook.genres) == []

    def test_source_counts_genres(self, rulebook):
        source = GenreTagSource("spotify", rulebook, ["jazz", "Jazz", "blues"])
        tags = source.get_interest_tags()
        assert tags["jazz"] == 2
        assert tags["music"] == 3
        assert tags["blues"] == 1


class TestStaticTagSource:
    def test_returns_copy(self):
        source = StaticTagSource("test", {"park": 1})
        source.get_interest_tags()["park"] = 99
        assert source.get_interest_tags() == {"park": 1}

    def test_update(self):
        source = StaticTagSource("test")
        source.update({"jazz": 2})
        assert source.get_interest_tags() == {"jazz": 2}


class TestPackageExports:
    """Sources plug into the aggregator through the package namespace."""

    def test_sources_exported(self, rulebook):
        from tidepool.core import interest

        aggregator = interest.InterestAggregator(rulebook, [
            interest.StaticTagSource("spotify", {"jazz": 3}),
            interest.AgeRangeSource(rulebook),
            interest.GenreTagSource("genres", rulebook),
            interest.FavoritesSource("favorites", rulebook),
        ])
        result = aggregator.run()
        assert result.active_sources == ["spotify"]
        assert result.total_sources == 4
