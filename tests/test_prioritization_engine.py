"""
Tests for the engine facade: weight slot, ranked list, summary and projection.
"""

from datetime import timedelta
import json

import pytest

from app.models.priority import InvalidWeightsError, RankingFilters, Tier
from app.services.prioritization_engine import PrioritizationEngine, default_weights
from app.services.repositories import InMemoryRiskRegistry, InMemoryServiceRequestRepository
from app.services.repositories.memory_repository import load_mock_collaborators
from conftest import NOW, make_request

SEVERITY_ONLY_VALUES = {
    "severity": 1,
    "people_impact": 0,
    "urgency": 0,
    "location_criticality": 0,
    "wait_time": 0,
    "recurrence": 0,
}


def ids(ranked):
    return [item.request.id for item in ranked]


def test_starts_with_default_weights(engine):
    assert engine.get_weights() == default_weights()


def test_ranked_list_scores_open_backlog(engine):
    ranked = engine.get_ranked_list()

    assert ids(ranked) == ["req-1", "req-2", "req-3"]
    assert [item.score for item in ranked] == [49, 37, 18]
    assert [item.tier for item in ranked] == [Tier.CRITICAL, Tier.HIGH, Tier.LOW]


def test_resolved_history_counts_towards_recurrence(engine):
    top = engine.get_ranked_list()[0]
    assert top.request.id == "req-1"
    assert top.metrics.recurrence == 1


def test_ranked_list_applies_filters_as_view(engine):
    ranked = engine.get_ranked_list(RankingFilters(neighborhood="Centro"))
    assert ids(ranked) == ["req-1", "req-3"]


def test_set_weights_swaps_whole_set_and_reranks(engine):
    before = engine.get_weights()

    engine.set_weights(SEVERITY_ONLY_VALUES)

    assert engine.get_weights().as_dict() == SEVERITY_ONLY_VALUES
    assert before == default_weights()
    assert [item.score for item in engine.get_ranked_list()] == [5, 4, 1]


def test_invalid_replacement_keeps_previous_weights(engine):
    engine.set_weights(SEVERITY_ONLY_VALUES)

    with pytest.raises(InvalidWeightsError):
        engine.set_weights({**SEVERITY_ONLY_VALUES, "urgency": 9})
    with pytest.raises(InvalidWeightsError):
        engine.set_weights({"severity": 2})

    assert engine.get_weights().as_dict() == SEVERITY_ONLY_VALUES


def test_reset_restores_defaults(engine):
    engine.set_weights(SEVERITY_ONLY_VALUES)
    assert engine.reset_weights() == default_weights()
    assert engine.get_weights() == default_weights()


def test_summary(engine):
    summary = engine.get_summary()

    assert summary.total == 3
    assert (summary.critical, summary.high, summary.medium, summary.low) == (1, 1, 0, 1)
    assert summary.max_score == 49
    assert summary.average_score == 34.7


def test_repository_changes_are_picked_up_on_next_pass(engine, repository):
    repository.upsert(make_request("req-2", status="resolved", priority_label="high",
                                   category="lighting", neighborhood="Cohabinal"))

    assert ids(engine.get_ranked_list()) == ["req-1", "req-3"]


def test_project_capacity_uses_trailing_throughput(engine):
    # One resolution in the last 30 days; backlog of three
    result = engine.project_capacity(extra_crews=2)

    assert result.backlog_size == 3
    assert result.current_clearance_days == 90
    assert result.projected_clearance_days == 1
    assert result.capacity_delta == 8.0


def test_project_capacity_worked_example(risk_registry):
    open_requests = [make_request(f"open-{i:03d}") for i in range(80)]
    resolved = [
        make_request(f"done-{i:03d}", status="resolved", created_at=NOW - timedelta(days=12),
                     resolved_at=NOW - timedelta(days=2))
        for i in range(240)
    ]
    engine = PrioritizationEngine(
        InMemoryServiceRequestRepository(open_requests + resolved),
        risk_registry,
        clock=lambda: NOW,
        throughput_window_days=30,
        crew_daily_throughput=4,
    )

    by_delta = engine.project_capacity(capacity_delta=8)
    by_crews = engine.project_capacity(extra_crews=2)

    assert by_delta.throughput_per_day == 8.0
    assert (by_delta.current_clearance_days, by_delta.projected_clearance_days) == (10, 5)
    assert by_crews.projected_clearance_days == 5


def test_empty_backlog(risk_registry):
    engine = PrioritizationEngine(InMemoryServiceRequestRepository(), risk_registry, clock=lambda: NOW)

    assert engine.get_ranked_list() == []
    assert engine.get_summary().total == 0
    assert engine.project_capacity(capacity_delta=5).current_clearance_days == 0


def test_unmapped_neighborhood_uses_baseline(repository):
    engine = PrioritizationEngine(repository, InMemoryRiskRegistry(), clock=lambda: NOW)

    assert all(item.metrics.location_criticality == 1 for item in engine.get_ranked_list())
    assert all(item.metrics.recurrence == 0 for item in engine.get_ranked_list())


class TestMockCollaborators:

    def test_loads_seed_file(self, tmp_path):
        seed = {
            "service_requests": {
                "a": {"protocol": "1", "status": "open", "category": "flooding",
                      "neighborhood": "Centro", "priority_label": "urgent",
                      "created_at": "2024-03-01T08:00:00Z"},
                "b": {"protocol": "2", "status": "resolved", "category": "flooding",
                      "neighborhood": "Centro", "created_at": "2024-02-01T08:00:00Z"},
            },
            "neighborhood_risk": {
                "Centro": {"risk_score": 82, "recurring_issue_tags": ["flooding"]},
                "Broken": {"risk_score": 140},
            },
        }
        path = tmp_path / "mock_db.json"
        path.write_text(json.dumps(seed), encoding="utf-8")

        repository, registry = load_mock_collaborators(str(path), "service_requests", "neighborhood_risk")

        # "b" is resolved without resolved_at and "Broken" is out of range: both skipped
        assert [r.id for r in repository.list_open_requests()] == ["a"]
        assert repository.list_resolved_requests(NOW - timedelta(days=365)) == []
        assert registry.risk_for("centro").risk_score == 82
        assert registry.risk_for("Broken") is None

    def test_missing_file_gives_empty_collaborators(self, tmp_path):
        repository, registry = load_mock_collaborators(
            str(tmp_path / "absent.json"), "service_requests", "neighborhood_risk"
        )
        assert repository.list_open_requests() == []
        assert registry.list_records() == []


def test_replaced_snapshot_is_used_by_next_pass(engine, repository):
    repository.replace_all([make_request("only", priority_label="urgent", category="flooding")])

    assert ids(engine.get_ranked_list()) == ["only"]
    assert engine.project_capacity().backlog_size == 1


def test_project_capacity_scoped_to_one_secretariat(risk_registry):
    def batch(prefix, secretariat, open_count, resolved_count):
        opened = [make_request(f"{prefix}-open-{i}", secretariat_id=secretariat) for i in range(open_count)]
        resolved = [
            make_request(f"{prefix}-done-{i}", status="resolved", secretariat_id=secretariat,
                         created_at=NOW - timedelta(days=8), resolved_at=NOW - timedelta(days=3))
            for i in range(resolved_count)
        ]
        return opened + resolved

    repository = InMemoryServiceRequestRepository(
        batch("drain", "drainage", 20, 60) + batch("light", "urban_services", 50, 240)
    )
    engine = PrioritizationEngine(repository, risk_registry, clock=lambda: NOW,
                                  throughput_window_days=30, crew_daily_throughput=4)

    whole = engine.project_capacity()
    drainage = engine.project_capacity(extra_crews=2, filters=RankingFilters(secretariat_id="drainage"))

    # Whole backlog: 70 requests at 10/day
    assert (whole.backlog_size, whole.current_clearance_days) == (70, 7)
    # Drainage alone: 20 requests at 2/day, plus 2 crews of 4/day
    assert drainage.backlog_size == 20
    assert drainage.throughput_per_day == 2.0
    assert (drainage.current_clearance_days, drainage.projected_clearance_days) == (10, 2)
