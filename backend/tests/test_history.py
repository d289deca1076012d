"""
Tests for historical analysis, VP tiers and coverage windows.
"""

from datetime import datetime, timedelta, timezone

import pytest

from wvw_planner.core.tiers import (
    Region,
    Tier,
    award_table_for_time,
    build_schedule,
    region_from_match_id,
    tier_for_time,
)
from wvw_planner.core.windows import TimeWindow, time_window_for
from wvw_planner.simulator.history import (
    PastSkirmish,
    alliance_key,
    analyze_historical_performance,
    analyze_match_history,
    calculate_required_performance,
    dominant_competitor,
    score_distribution,
    skirmishes_from_scores,
    window_score_totals,
)
from wvw_planner.simulator.models import (
    AwardTable,
    DesiredOutcome,
    Difficulty,
    HistoricalStats,
    Placement,
    PlacementProbabilities,
    UNIFORM_PROBABILITIES,
)
from wvw_planner.simulator.tiebreakers import current_standings, placements_from_scores

from conftest import RED, BLUE, GREEN, make_events


def utc(hour, day=5):
    return datetime(2024, 1, day, hour, 0, tzinfo=timezone.utc)


@pytest.fixture
def skirmishes():
    """Red wins twice in NA prime and comes last once in OCX."""
    return [
        PastSkirmish(1, utc(1), {RED: Placement.FIRST, BLUE: Placement.SECOND, GREEN: Placement.THIRD}),
        PastSkirmish(2, utc(3), {RED: Placement.FIRST, BLUE: Placement.THIRD, GREEN: Placement.SECOND}),
        PastSkirmish(3, utc(10), {RED: Placement.THIRD, BLUE: Placement.FIRST, GREEN: Placement.SECOND}),
    ]


class TestTiebreakers:
    """Tests for ranking with ties."""

    def test_tie_goes_to_identity_order(self):
        placements = placements_from_scores({RED: 10, BLUE: 10, GREEN: 5})

        assert placements[RED] == Placement.FIRST
        assert placements[BLUE] == Placement.SECOND
        assert placements[GREEN] == Placement.THIRD

    def test_current_standings(self):
        standings = current_standings({RED: 1, BLUE: 30, GREEN: 20})

        assert standings.order == (BLUE, GREEN, RED)


class TestHistoricalPerformance:
    """Tests for analyze_historical_performance."""

    def test_overall(self, skirmishes):
        stats = analyze_historical_performance(skirmishes, RED)

        assert stats.total_events == 3
        assert stats.overall.first == pytest.approx(2 / 3)
        assert stats.overall.second == 0
        assert stats.overall.third == pytest.approx(1 / 3)

    def test_by_window(self, skirmishes):
        stats = analyze_historical_performance(skirmishes, RED)

        assert stats.probabilities_for(TimeWindow.NA_PRIME).first == 1.0
        assert stats.probabilities_for(TimeWindow.OCX).third == 1.0

    def test_empty_window_falls_back(self, skirmishes):
        stats = analyze_historical_performance(skirmishes, RED)

        assert stats.probabilities_for(TimeWindow.EU_PRIME) == stats.overall

    def test_no_history_is_uniform(self):
        stats = analyze_historical_performance([], GREEN)

        assert stats.overall == UNIFORM_PROBABILITIES
        assert all(stats.probabilities_for(w) == UNIFORM_PROBABILITIES for w in TimeWindow)
        assert stats.total_events == 0

    def test_match_history_covers_all_worlds(self, skirmishes):
        history = analyze_match_history(skirmishes)

        assert set(history) == {RED, BLUE, GREEN}
        assert history[BLUE].overall.first == pytest.approx(1 / 3)

    def test_from_scores(self):
        start = utc(0)

        past = skirmishes_from_scores(
            [{RED: 300, BLUE: 200, GREEN: 100}, {RED: 50, BLUE: 250, GREEN: 150}],
            start
        )

        assert [s.skirmish_id for s in past] == [1, 2]
        assert past[1].timestamp == start + timedelta(hours=2)
        assert past[1].placements[BLUE] == Placement.FIRST
        assert past[1].placements[RED] == Placement.THIRD


class TestAlliances:
    """Tests for per-alliance tendencies."""

    @pytest.fixture
    def relinked(self):
        """Red wins twice with one alliance, then relinks and comes last."""
        awards = lambda t: AwardTable(5, 4, 3)
        first_match = skirmishes_from_scores(
            [
                {RED: 300, BLUE: 200, GREEN: 100},
                {RED: 250, BLUE: 100, GREEN: 150},
                {RED: 50, BLUE: 250, GREEN: 150},
            ],
            utc(0),
            awards_for=awards,
            alliances={RED: [1003, 1001], BLUE: [2001], GREEN: [3001]}
        )
        second_match = skirmishes_from_scores(
            [{RED: 10, BLUE: 30, GREEN: 20}],
            utc(0, day=12),
            first_id=4,
            awards_for=awards,
            alliances={RED: [1004, 1001], BLUE: [2001], GREEN: [3001]}
        )
        return first_match + second_match

    def test_alliance_key_is_sorted(self):
        assert alliance_key([1003, 1001, 1002]) == "1001,1002,1003"

    def test_tallied_per_alliance(self, relinked):
        stats = analyze_historical_performance(relinked, RED)

        assert set(stats.by_alliance) == {"1001,1003", "1001,1004"}
        first = stats.by_alliance["1001,1003"]
        assert first.world_ids == [1001, 1003]
        assert first.summary.total_skirmishes == 3
        assert first.overall.first == pytest.approx(2 / 3)
        assert first.by_window[TimeWindow.NA_PRIME].first == pytest.approx(2 / 3)
        assert first.by_window[TimeWindow.EU_PRIME] == first.overall

    def test_current_alliance_is_latest(self, relinked):
        stats = analyze_historical_performance(relinked, RED)

        assert stats.current_alliance == "1001,1004"
        current = stats.for_alliance()
        assert current.overall.third == 1.0
        assert current.total_events == 1

    def test_named_and_unknown_alliance(self, relinked):
        stats = analyze_historical_performance(relinked, RED)

        assert stats.for_alliance("1001,1003").overall.first == pytest.approx(2 / 3)
        assert stats.for_alliance("9999") is stats

    def test_no_alliance_data(self, skirmishes):
        stats = analyze_historical_performance(skirmishes, RED)

        assert stats.by_alliance == {}
        assert stats.current_alliance is None
        assert stats.for_alliance() is stats

    def test_window_averages(self, relinked):
        stats = analyze_historical_performance(relinked[:3], RED)

        na_prime = stats.window_summaries[TimeWindow.NA_PRIME]
        assert (na_prime.first, na_prime.second, na_prime.third) == (2, 0, 1)
        assert na_prime.average_score == 200
        assert na_prime.average_vp == pytest.approx(13 / 3)
        assert stats.window_summaries[TimeWindow.EU_PRIME].total_skirmishes == 0
        assert stats.summary.average_vp == pytest.approx(13 / 3)

    def test_to_dict(self, relinked):
        data = analyze_historical_performance(relinked, RED).to_dict()

        assert data["current_alliance"] == "1001,1004"
        assert data["by_alliance"]["1001,1003"]["summary"]["placements"]["first"] == 2
        assert data["window_summaries"]["na_prime"]["total_skirmishes"] == 4


class TestWindowScores:
    """Tests for per-window score totals."""

    @pytest.fixture
    def totals(self):
        return window_score_totals([
            PastSkirmish.from_scores(1, utc(0), {RED: 300, BLUE: 200, GREEN: 100}),
            PastSkirmish.from_scores(2, utc(19), {RED: 100, BLUE: 400, GREEN: 50}),
        ])

    def test_dominant(self, totals):
        assert dominant_competitor(totals[TimeWindow.NA_PRIME]) == RED
        assert dominant_competitor(totals[TimeWindow.EU_PRIME]) == BLUE
        assert dominant_competitor(totals[TimeWindow.OCX]) is None

    def test_dominant_tie_goes_to_identity_order(self):
        assert dominant_competitor({RED: 5, BLUE: 5, GREEN: 1}) == RED

    def test_distribution(self, totals):
        distribution = score_distribution(totals, RED)

        assert distribution[TimeWindow.NA_PRIME] == 75.0
        assert distribution[TimeWindow.EU_PRIME] == 25.0
        assert distribution[TimeWindow.OCX] == 0.0

    def test_distribution_without_score(self):
        totals = window_score_totals([])

        assert set(score_distribution(totals, GREEN).values()) == {0.0}


class TestRequiredPerformance:
    """Tests for calculate_required_performance."""

    def history(self, red, blue, green):
        return {
            c: HistoricalStats(competitor=c, overall=PlacementProbabilities(first, 0.5, 0.5 - first))
            for c, first in ((RED, red), (BLUE, blue), (GREEN, green))
        }

    def test_behind_leader(self):
        results = calculate_required_performance(
            {RED: 1000, BLUE: 1010, GREEN: 900},
            make_events(*[(5, 4, 3)] * 3),
            DesiredOutcome(RED, BLUE, GREEN),
            self.history(0.4, 0.3, 0.3)
        )
        by_world = {r.competitor: r for r in results}

        red = by_world[RED]
        assert red.target_placement == Placement.FIRST
        assert red.required_first_places == 6
        assert red.required_win_rate == 1.0
        assert red.difficulty == Difficulty.VERY_HARD
        assert red.feasibility == "Very difficult - needs 100.0% vs historical 40.0%"

        blue = by_world[BLUE]
        assert blue.required_first_places == 0
        assert blue.difficulty == Difficulty.EASY
        assert blue.feasibility == "On track - historically wins 30.0%"
        assert by_world[GREEN].target_placement == Placement.THIRD

    def test_challenging(self, tied_scores):
        results = calculate_required_performance(
            tied_scores,
            make_events(*[(5, 4, 3)] * 3),
            DesiredOutcome(RED, BLUE, GREEN),
            self.history(0.25, 0.25, 0.25)
        )
        red = results[0]

        assert red.required_first_places == 1
        assert red.required_win_rate == pytest.approx(1 / 3)
        assert red.difficulty == Difficulty.MODERATE
        assert red.feasibility == "Challenging - needs 33.3% vs historical 25.0%"

    def test_no_skirmishes_left(self):
        results = calculate_required_performance(
            {RED: 1, BLUE: 2, GREEN: 3}, [], DesiredOutcome(RED, BLUE, GREEN),
            self.history(0.5, 0.5, 0.5)
        )

        assert results[0].required_win_rate == 1.0
        assert results[0].to_dict()["difficulty"] == "hard"


class TestTimeWindows:
    """Tests for time_window_for."""

    @pytest.mark.parametrize("hour,expected", [
        (0, TimeWindow.NA_PRIME),
        (4, TimeWindow.NA_PRIME),
        (5, TimeWindow.OFF_HOURS),
        (8, TimeWindow.OCX),
        (12, TimeWindow.OCX),
        (13, TimeWindow.OFF_HOURS),
        (18, TimeWindow.EU_PRIME),
        (22, TimeWindow.EU_PRIME),
        (23, TimeWindow.OFF_HOURS),
    ])
    def test_windows(self, hour, expected):
        assert time_window_for(utc(hour)) == expected

    def test_converts_to_utc(self):
        """Test 8 PM US Eastern lands in NA prime."""
        eastern = datetime(2024, 1, 5, 20, 0, tzinfo=timezone(timedelta(hours=-5)))

        assert time_window_for(eastern) == TimeWindow.NA_PRIME


class TestTiers:
    """Tests for VP tier lookup."""

    def test_na_peak(self):
        assert award_table_for_time(utc(1), Region.NA).as_tuple() == (43, 32, 21)

    def test_eu_peak(self):
        assert award_table_for_time(utc(19), Region.EU).as_tuple() == (51, 37, 24)

    def test_eu_low(self):
        assert tier_for_time(utc(3), Region.EU) == Tier.LOW
        assert award_table_for_time(utc(3), Region.EU).as_tuple() == (15, 14, 12)

    def test_naive_is_utc(self):
        assert tier_for_time(datetime(2024, 1, 5, 9, 0)) == Tier.LOW

    def test_offset_time(self):
        eastern = datetime(2024, 1, 5, 20, 0, tzinfo=timezone(timedelta(hours=-5)))

        assert tier_for_time(eastern, Region.NA) == Tier.PEAK

    def test_build_schedule(self):
        events = build_schedule(utc(22), 3, Region.NA, first_id=7)

        assert [e.id for e in events] == [7, 8, 9]
        assert [e.awards.first for e in events] == [31, 43, 43]
        assert events[2].start_time == utc(2, day=6)

    @pytest.mark.parametrize("match_id,expected", [
        ("1-5", Region.NA),
        ("2-3", Region.EU),
    ])
    def test_region_from_match_id(self, match_id, expected):
        assert region_from_match_id(match_id) == expected
