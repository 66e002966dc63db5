from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from jobtracker.core.applications import (
    compute_statistics,
    filter_applications,
    most_applied_position,
    recent_applications,
    round_half_up,
)
from jobtracker.types import JobApplicationRecord


def make_record(record_id: int, status: str = "applied", **overrides) -> JobApplicationRecord:
    values = {
        "id": record_id,
        "user_id": "owner-1",
        "company": f"Company {record_id}",
        "position": "Engineer",
        "status": status,
        "application_date": date(2024, 1, 1) + timedelta(days=record_id),
        "created_at": datetime(2024, 1, 1, tzinfo=UTC) + timedelta(hours=record_id),
    }
    values.update(overrides)
    return JobApplicationRecord(**values)


def test_statistics_counts_and_success_rate() -> None:
    statuses = ["applied"] * 3 + ["interview"] * 3 + ["offer"] * 2 + ["rejected"] + ["withdrawn"]
    records = [make_record(index, status) for index, status in enumerate(statuses, start=1)]

    stats = compute_statistics(records)

    assert stats.total == 10
    assert (stats.applied, stats.interview, stats.offer, stats.rejected, stats.withdrawn) == (3, 3, 2, 1, 1)
    assert stats.success_rate == 50


def test_statistics_for_empty_snapshot() -> None:
    stats = compute_statistics([])
    assert stats.total == 0
    assert stats.success_rate == 0


def test_status_counts_sum_to_total() -> None:
    statuses = ["applied", "offer", "offer", "rejected", "interview", "withdrawn", "applied"]
    stats = compute_statistics([make_record(index, status) for index, status in enumerate(statuses)])
    assert stats.applied + stats.interview + stats.offer + stats.rejected + stats.withdrawn == stats.total


def test_success_rate_rounds_half_up() -> None:
    # 1 of 8 is 12.5 percent.
    records = [make_record(0, "offer")] + [make_record(index, "applied") for index in range(1, 8)]
    assert compute_statistics(records).success_rate == 13

    # 1 of 3 is 33.33 percent.
    records = [make_record(0, "interview"), make_record(1), make_record(2)]
    assert compute_statistics(records).success_rate == 33


@pytest.mark.parametrize(("value", "expected"), [(0.5, 1), (2.5, 3), (2.49, 2), (66.666, 67)])
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected


def test_filter_by_search_term_and_status() -> None:
    records = [
        make_record(1, "applied", company="Acme", position="Backend Engineer", location="Berlin"),
        make_record(2, "interview", company="Globex", position="Data Analyst", location="Remote"),
        make_record(3, "interview", company="Initech", position="Platform Engineer", location=""),
    ]

    assert [r.id for r in filter_applications(records, search="acme")] == [1]
    assert [r.id for r in filter_applications(records, search="ENGINEER")] == [1, 3]
    assert [r.id for r in filter_applications(records, search="remote")] == [2]
    assert [r.id for r in filter_applications(records, status="interview")] == [2, 3]
    assert [r.id for r in filter_applications(records, search="engineer", status="interview")] == [3]
    assert filter_applications(records) == records


def test_recent_applications_orders_by_creation_time() -> None:
    records = [make_record(index) for index in range(1, 8)]
    assert [r.id for r in recent_applications(records)] == [7, 6, 5, 4, 3]
    assert [r.id for r in recent_applications(records, limit=2)] == [7, 6]


def test_most_applied_position() -> None:
    records = [
        make_record(1, position="Designer"),
        make_record(2, position="Engineer"),
        make_record(3, position="Engineer"),
    ]
    assert most_applied_position(records) == "Engineer"
    assert most_applied_position([]) is None
