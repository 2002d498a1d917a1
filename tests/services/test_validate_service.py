from __future__ import annotations

import asyncio
import logging
from typing import List

import pytest

from rowguard.domain.errors import ResultNotFoundError
from rowguard.domain.results import RunStatus, ValidationProgress
from rowguard.services.validate_service import ValidationService


def make_service() -> ValidationService:
    return ValidationService(logging.getLogger("rowguard.test.service"))


def test_accessors_before_any_run() -> None:
    service = make_service()
    assert service.get_progress("nope") is None
    assert service.get_result("nope") is None
    assert service.get_status("nope") is None
    with pytest.raises(ResultNotFoundError):
        service.generate_report("nope")
    with pytest.raises(ResultNotFoundError):
        service.get_preview("nope")


@pytest.mark.asyncio
async def test_progress_visible_only_while_running() -> None:
    service = make_service()
    rows = [{"userId": str(i)} for i in range(50)]
    seen: List[ValidationProgress] = []

    async def poll() -> None:
        while service.get_status("live") != RunStatus.COMPLETED:
            snap = service.get_progress("live")
            if snap is not None:
                seen.append(snap)
            await asyncio.sleep(0)

    poller = asyncio.ensure_future(poll())
    result = await service.run("live", rows, ["userId"], {"batch_size": 10})
    await poller

    assert seen, "poller never observed an in-flight snapshot"
    assert all(0 <= s.current_row <= s.total_rows == 50 for s in seen)
    assert [s.current_row for s in seen] == sorted(s.current_row for s in seen)
    assert service.get_progress("live") is None
    assert service.get_result("live") is result


@pytest.mark.asyncio
async def test_progress_snapshot_is_a_copy() -> None:
    service = make_service()
    captured: List[ValidationProgress] = []

    async def grab() -> None:
        while not captured:
            snap = service.get_progress("copy")
            if snap is not None:
                captured.append(snap)
            await asyncio.sleep(0)

    grabber = asyncio.ensure_future(grab())
    await service.run("copy", [{"n": i} for i in range(4)], ["n"], {"batch_size": 1})
    await grabber

    first = captured[0]
    assert first.current_row < 4


@pytest.mark.asyncio
async def test_report_recommendations_for_dirty_data() -> None:
    service = make_service()
    rows = [{"userId": "x", "email": "bad"} for _ in range(4)] + [
        {"userId": "1", "email": "a@b.co"}
    ]
    await service.run("dirty", rows, ["userId", "email"], {"stop_on_error_threshold": 1000})

    report = service.generate_report("dirty")

    assert report.job_id == "dirty"
    assert report.status == RunStatus.COMPLETED
    assert len(report.errors) == 8
    recs = report.recommendations
    assert recs[0].startswith("High error rate detected")
    assert "Field 'userId' has 4 errors. Consider data cleaning or rule adjustment." in recs
    assert "Field 'email' has 4 errors. Consider data cleaning or rule adjustment." in recs
    assert "Validation rule 'Numeric Field' triggered 4 times. Review rule configuration." in recs
    assert not any("successfully" in r for r in recs)


@pytest.mark.asyncio
async def test_report_for_clean_data() -> None:
    service = make_service()
    await service.run("clean", [{"userId": "1"}], ["userId"])
    report = service.generate_report("clean")
    assert report.recommendations == [
        "Data validation completed successfully with minimal issues."
    ]


@pytest.mark.asyncio
async def test_preview_and_error_summary() -> None:
    service = make_service()
    rows = [{"userId": "x" if i % 2 else str(i)} for i in range(10)]
    await service.run("views", rows, ["userId"], {"stop_on_error_threshold": 100})

    page = service.get_preview("views", rows=3)
    assert [p.row for p in page.preview] == [1, 2, 3]
    assert page.total_rows == 10
    assert len(page.errors) == 5

    summary = service.get_error_summary("views")
    assert summary.total_errors == 5
    assert summary.errors_by_rule == {"Numeric Field": 5}
    assert len(summary.top_errors) == 5

    only_warnings = service.get_error_summary("views", severity="warning")
    assert only_warnings.total_errors == 0
    assert only_warnings.top_errors == []

    with pytest.raises(ValueError):
        service.get_error_summary("views", severity="fatal")


@pytest.mark.asyncio
async def test_clear_removes_result() -> None:
    service = make_service()
    await service.run("gone", [{"name": "a"}], ["name"])
    assert service.get_result("gone") is not None

    service.clear("gone")

    assert service.get_result("gone") is None
    assert service.get_status("gone") is None
    with pytest.raises(ResultNotFoundError):
        service.generate_report("gone")
