"""
Test finish-to-start schedule propagation.

Rule: successor.start >= predecessor.end + lag + 1 day. Violating
successors are shifted (duration kept); those with slack stay put.
"""

from datetime import date

import pytest
from sqlmodel import select

from app.models import ChangeLog, TaskType
from app.services.scheduling import minimum_start, shift_to, propagate_schedule
from app.exceptions import PropagationError


class TestRules:

    def test_minimum_start_adds_lag_and_one_day(self):
        assert minimum_start(date(2025, 2, 10), 0) == date(2025, 2, 11)
        assert minimum_start(date(2025, 2, 10), 2) == date(2025, 2, 13)

    def test_shift_keeps_duration(self):
        assert shift_to(date(2025, 2, 1), date(2025, 2, 5), date(2025, 2, 13)) == (
            date(2025, 2, 13),
            date(2025, 2, 17),
        )


class TestPropagateSchedule:

    @pytest.mark.asyncio
    async def test_violation_pushes_successor(self, test_session, make_project, make_task, link):
        """
        Scenario: A ends Feb 10, A -> B lag 2, B is Feb 1-5
        Expected: B moves to Feb 13-17
        """
        project = await make_project()
        a = await make_task(project, "A", date(2025, 2, 1), date(2025, 2, 10))
        b = await make_task(project, "B", date(2025, 2, 1), date(2025, 2, 5))
        await link(a, b, lag_days=2)

        affected = await propagate_schedule(test_session, project.id, a.id, "tester")

        assert [t.id for t in affected] == [b.id]
        assert b.start_date == date(2025, 2, 13)
        assert b.end_date == date(2025, 2, 17)

    @pytest.mark.asyncio
    async def test_slack_is_preserved(self, test_session, make_project, make_task, link):
        """
        Scenario: A ends Jan 5, B set to Jan 20
        Expected: B untouched
        """
        project = await make_project()
        a = await make_task(project, "A", date(2025, 1, 1), date(2025, 1, 5))
        b = await make_task(project, "B", date(2025, 1, 20), date(2025, 1, 22))
        await link(a, b)

        affected = await propagate_schedule(test_session, project.id, a.id, "tester")

        assert affected == []
        assert b.start_date == date(2025, 1, 20)

    @pytest.mark.asyncio
    async def test_second_run_changes_nothing(self, test_session, make_project, make_task, link):
        project = await make_project()
        a = await make_task(project, "A", date(2025, 2, 1), date(2025, 2, 10))
        b = await make_task(project, "B", date(2025, 2, 1), date(2025, 2, 5))
        await link(a, b, lag_days=2)

        await propagate_schedule(test_session, project.id, a.id, "tester")
        second = await propagate_schedule(test_session, project.id, a.id, "tester")

        assert second == []
        assert b.start_date == date(2025, 2, 13)

    @pytest.mark.asyncio
    async def test_cascade_through_chain(self, test_session, make_project, make_task, link):
        """
        Scenario: A (Mar 1-10) -> B (Mar 1-3) -> C (Mar 4-5)
        Expected: B Mar 11-13, then C Mar 14-15
        """
        project = await make_project()
        a = await make_task(project, "A", date(2025, 3, 1), date(2025, 3, 10))
        b = await make_task(project, "B", date(2025, 3, 1), date(2025, 3, 3))
        c = await make_task(project, "C", date(2025, 3, 4), date(2025, 3, 5))
        await link(a, b)
        await link(b, c)

        affected = await propagate_schedule(test_session, project.id, a.id, "tester")

        assert [t.id for t in affected] == [b.id, c.id]
        assert (b.start_date, b.end_date) == (date(2025, 3, 11), date(2025, 3, 13))
        assert (c.start_date, c.end_date) == (date(2025, 3, 14), date(2025, 3, 15))

    @pytest.mark.asyncio
    async def test_diamond_reports_each_task_once(self, test_session, make_project, make_task, link):
        """
        Scenario: A -> B -> D and A -> C -> D, all violating
        Expected: D listed once and lands after the later of B and C
        """
        project = await make_project()
        a = await make_task(project, "A", date(2025, 3, 1), date(2025, 3, 10))
        b = await make_task(project, "B", date(2025, 3, 1), date(2025, 3, 2))
        c = await make_task(project, "C", date(2025, 3, 1), date(2025, 3, 5))
        d = await make_task(project, "D", date(2025, 3, 1), date(2025, 3, 1))
        await link(a, b)
        await link(a, c)
        await link(b, d)
        await link(c, d)

        affected = await propagate_schedule(test_session, project.id, a.id, "tester")

        ids = [t.id for t in affected]
        assert len(ids) == len(set(ids)) == 3
        # C ends Mar 15, so D starts Mar 16
        assert d.start_date == date(2025, 3, 16)

    @pytest.mark.asyncio
    async def test_missing_dates_and_summaries_skipped(self, test_session, make_project, make_task, link):
        project = await make_project()
        a = await make_task(project, "A", date(2025, 3, 1), date(2025, 3, 10))
        undated = await make_task(project, "Undated")
        summary = await make_task(project, "Phase", date(2025, 3, 1), date(2025, 3, 2),
                                  type=TaskType.SUMMARY)
        await link(a, undated)
        await link(a, summary)

        affected = await propagate_schedule(test_session, project.id, a.id, "tester")

        assert affected == []
        assert undated.start_date is None
        assert summary.start_date == date(2025, 3, 1)

    @pytest.mark.asyncio
    async def test_shift_is_logged(self, test_session, make_project, make_task, link):
        project = await make_project()
        a = await make_task(project, "A", date(2025, 2, 1), date(2025, 2, 10))
        b = await make_task(project, "B", date(2025, 2, 1), date(2025, 2, 5))
        await link(a, b, lag_days=2)

        await propagate_schedule(test_session, project.id, a.id, "tester")

        result = await test_session.execute(
            select(ChangeLog).where(ChangeLog.entity_id == b.id)
        )
        entries = list(result.scalars().all())
        assert len(entries) == 1
        assert entries[0].field == "auto-scheduled"
        assert entries[0].user_id == "tester"
        assert "2025-02-13" in entries[0].after

    @pytest.mark.asyncio
    async def test_deleted_successor_not_moved(self, test_session, make_project, make_task, link):
        """
        Scenario: A (ends Feb 10) -> B (Feb 1-5), B soft-deleted
        Expected: nothing moves, B keeps its dates
        """
        project = await make_project()
        a = await make_task(project, "A", date(2025, 2, 1), date(2025, 2, 10))
        b = await make_task(project, "B", date(2025, 2, 1), date(2025, 2, 5))
        await link(a, b)
        b.deleted_at = b.created_at
        await test_session.flush()

        affected = await propagate_schedule(test_session, project.id, a.id, "tester")

        assert affected == []
        assert (b.start_date, b.end_date) == (date(2025, 2, 1), date(2025, 2, 5))

    @pytest.mark.asyncio
    async def test_corrupt_cycle_hits_depth_guard(self, test_session, make_project, make_task, link):
        """
        Scenario: A -> B and B -> A stored directly, bypassing the cycle check
        Expected: propagation stops with PropagationError instead of looping
        """
        project = await make_project()
        a = await make_task(project, "A", date(2025, 3, 1), date(2025, 3, 10))
        b = await make_task(project, "B", date(2025, 3, 1), date(2025, 3, 2))
        await link(a, b)
        await link(b, a)

        with pytest.raises(PropagationError):
            await propagate_schedule(test_session, project.id, a.id, "tester")
