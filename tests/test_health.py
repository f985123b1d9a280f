"""
Tests for journey health scoring.

Covers:
    - phase_health_score weights, rounding and clamping
    - Order independence and determinism
    - Struggle field parsing (JSON and legacy text)
    - average_health / health_category
    - Journey, project and client aggregation over a snapshot
    - Report payloads and NotFoundError for unknown ids
"""

import itertools
import json

import pytest

from journeymap.core.exceptions import NotFoundError
from journeymap.models.entities import AppState, Job, Opportunity, Phase
from journeymap.services.health import (
    average_health,
    client_health,
    compute_client_health,
    compute_journey_health,
    compute_project_health,
    health_category,
    journey_health,
    phase_health_score,
    project_health,
)
from journeymap.services.phase_fields import parse_list, parse_struggles


def _make_phase(**fields):
    return Phase(id="ph-1", journey_id="j-1", **fields)


def _make_opp(oid, priority="Medium"):
    return Opportunity(
        id=oid, client_id="c", project_id="p", journey_id="j-1",
        phase_id="ph-1", name=f"Opp {oid}", priority=priority,
    )


def _make_job(jid, tag="Functional"):
    return Job(id=jid, client_id="c", name=f"Job {jid}", tag=tag)


def _struggles(*tags):
    return json.dumps([{"text": f"s{i}", "tag": t} for i, t in enumerate(tags)])


# ═════════════════════════════════════════════════════════════════════════════
# Phase score
# ═════════════════════════════════════════════════════════════════════════════


class TestPhaseScore:
    def test_empty_phase_is_base(self):
        assert phase_health_score(_make_phase(), [], []) == 50

    def test_customer_struggle_penalties(self):
        phase = _make_phase(struggles=_struggles("High", "Medium", "Low"))
        assert phase_health_score(phase, [], []) == 50 - 12 - 6 - 2

    def test_internal_struggle_penalties(self):
        phase = _make_phase(internal_struggles=_struggles("High", "Medium", "Low"))
        assert phase_health_score(phase, [], []) == 50 - 10 - 5 - 2

    def test_opportunity_bonus(self):
        opps = [_make_opp("1", "High"), _make_opp("2", "Medium"), _make_opp("3", "Low")]
        assert phase_health_score(_make_phase(), opps, []) == 50 + 10 + 5 + 2

    def test_all_differentiating_jobs(self):
        jobs = [_make_job("1", "Social"), _make_job("2", "Emotional")]
        assert phase_health_score(_make_phase(), [], jobs) == 75

    def test_functional_jobs_add_nothing(self):
        assert phase_health_score(_make_phase(), [], [_make_job("1")]) == 50

    def test_half_point_rounds_up(self):
        # 50 + 25 * 1/2 = 62.5
        jobs = [_make_job("1", "Social"), _make_job("2")]
        assert phase_health_score(_make_phase(), [], jobs) == 63

    def test_clamped_at_zero(self):
        phase = _make_phase(struggles=_struggles(*["High"] * 6))
        assert phase_health_score(phase, [], []) == 0

    def test_clamped_at_hundred(self):
        opps = [_make_opp(str(i), "High") for i in range(8)]
        assert phase_health_score(_make_phase(), opps, []) == 100

    def test_score_always_in_bounds(self):
        for n_struggles, n_opps, n_social in itertools.product(range(0, 8, 3), range(0, 9, 4), range(3)):
            phase = _make_phase(
                struggles=_struggles(*["High"] * n_struggles),
                internal_struggles=_struggles(*["Medium"] * n_struggles),
            )
            opps = [_make_opp(str(i), "High") for i in range(n_opps)]
            jobs = [_make_job(str(i), "Social") for i in range(n_social)] + [_make_job("f")]
            score = phase_health_score(phase, opps, jobs)
            assert isinstance(score, int)
            assert 0 <= score <= 100

    def test_order_independent(self):
        phase = _make_phase(struggles=_struggles("High", "Low"))
        opps = [_make_opp("1", "High"), _make_opp("2", "Low"), _make_opp("3")]
        jobs = [_make_job("1", "Social"), _make_job("2"), _make_job("3", "Emotional")]
        expected = phase_health_score(phase, opps, jobs)
        for o in itertools.permutations(opps):
            for j in itertools.permutations(jobs):
                assert phase_health_score(phase, list(o), list(j)) == expected

    def test_deterministic(self):
        phase = _make_phase(internal_struggles=_struggles("High"))
        opps = [_make_opp("1", "High")]
        assert phase_health_score(phase, opps, []) == phase_health_score(phase, opps, [])

    def test_legacy_struggle_text(self):
        phase = _make_phase(struggles="Slow site\nConfusing form; No help")
        assert phase_health_score(phase, [], []) == 50 - 3 * 6


# ═════════════════════════════════════════════════════════════════════════════
# Field parsing
# ═════════════════════════════════════════════════════════════════════════════


class TestStruggleParsing:
    def test_json_items(self):
        items = parse_struggles(_struggles("High", "Low"))
        assert [(s.text, s.tag) for s in items] == [("s0", "High"), ("s1", "Low")]

    def test_invalid_entries_dropped(self):
        value = json.dumps([
            {"text": "ok", "tag": "Medium"},
            {"text": "bad tag", "tag": "Urgent"},
            {"tag": "High"},
            {"text": "list tag", "tag": ["High"]},
            {"text": "object tag", "tag": {"level": "High"}},
            "plain",
        ])
        assert [s.text for s in parse_struggles(value)] == ["ok"]

    def test_unhashable_tag_does_not_break_score(self):
        phase = _make_phase(
            struggles=json.dumps([{"text": "x", "tag": ["High"]}]),
            internal_struggles=json.dumps([{"text": "y", "tag": {"a": 1}}]),
        )
        assert phase_health_score(phase, [], []) == 50

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity"])
    def test_non_json_constants_are_legacy_text(self, value):
        items = parse_struggles(value)
        assert [(s.text, s.tag) for s in items] == [(value, "Medium")]
        assert phase_health_score(_make_phase(struggles=value), [], []) == 44

    def test_deeply_nested_json_is_legacy_text(self):
        assert len(parse_struggles("[" * 100000)) == 1

    def test_legacy_text_is_medium(self):
        items = parse_struggles("a • b")
        assert [(s.text, s.tag) for s in items] == [("a", "Medium"), ("b", "Medium")]

    def test_list_value_is_medium(self):
        assert [s.tag for s in parse_struggles(["a", "b"])] == ["Medium", "Medium"]

    def test_json_non_list(self):
        assert parse_struggles('{"text": "x"}') == []

    def test_blank(self):
        assert parse_struggles("") == []
        assert parse_struggles(None) == []

    def test_parse_list(self):
        assert parse_list(" a ;\n\nb•c ") == ["a", "b", "c"]


# ═════════════════════════════════════════════════════════════════════════════
# Averages and categories
# ═════════════════════════════════════════════════════════════════════════════


class TestAverages:
    def test_empty_is_none(self):
        assert average_health([]) is None

    def test_single(self):
        assert average_health([37]) == 37

    def test_extremes(self):
        assert average_health([0, 100]) == 50

    def test_half_rounds_up(self):
        assert average_health([50, 51]) == 51

    def test_order_invariant(self):
        assert average_health([80, 40, 13]) == average_health([13, 80, 40])

    @pytest.mark.parametrize("score,expected", [
        (100, "good"), (60, "good"), (59, "mid"), (40, "mid"), (39, "bad"), (0, "bad"), (None, None),
    ])
    def test_category(self, score, expected):
        assert health_category(score) == expected


# ═════════════════════════════════════════════════════════════════════════════
# Aggregation over the sample snapshot (see conftest)
# ═════════════════════════════════════════════════════════════════════════════


class TestAggregation:
    def test_journey(self, state):
        assert journey_health("j1", state) == 60
        assert journey_health("j2", state) == 100

    def test_journey_without_phases(self, state):
        assert journey_health("j3", state) is None

    def test_project_skips_unscored_journeys(self, state):
        assert project_health("p1", state) == 60
        assert project_health("p2", state) == 100

    def test_client_averages_journeys(self, state):
        # journeys 60 and 100, not phases 80, 40 and 100
        assert client_health("c1", state) == 80

    def test_client_without_journeys(self, state):
        assert client_health("c2", state) is None

    def test_unknown_client(self, state):
        assert client_health("nope", state) is None

    def test_empty_state(self):
        assert client_health("c1", AppState()) is None


class TestReports:
    def test_journey_report(self, state):
        report = compute_journey_health("j1", state)
        assert report["journey_name"] == "Sign up"
        assert report["health"] == 60
        assert report["category"] == "good"
        assert [(p["phase_id"], p["health"], p["category"]) for p in report["phases"]] == [
            ("ph1", 80, "good"),
            ("ph2", 40, "mid"),
        ]
        assert "generated_at" in report

    def test_project_report(self, state):
        report = compute_project_health("p2", state)
        assert report["health"] == 100
        journeys = {j["journey_id"]: j for j in report["journeys"]}
        assert journeys["j3"]["health"] is None
        assert journeys["j3"]["phase_count"] == 0
        assert journeys["j2"]["phase_count"] == 1

    def test_client_report(self, state):
        report = compute_client_health("c1", state)
        assert report["client_name"] == "Acme"
        assert report["health"] == 80
        assert [p["health"] for p in report["projects"]] == [60, 100]

    def test_client_report_without_scores(self, state):
        report = compute_client_health("c2", state)
        assert report["health"] is None
        assert report["category"] is None
        assert report["projects"] == []

    @pytest.mark.parametrize("func", [
        compute_journey_health, compute_project_health, compute_client_health,
    ])
    def test_unknown_id_raises(self, func, state):
        with pytest.raises(NotFoundError):
            func("does-not-exist", state)
