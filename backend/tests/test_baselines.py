"""
Test baselines, their diff against the live schedule, and time logs.
"""

from datetime import date

import pytest

from app.schemas import TimeLogCreate
from app.services import baselines as baseline_service
from app.services import tasks as task_service
from app.services.time_logs import create_time_log, list_time_logs, actual_pd_by_task


class TestBaselines:

    @pytest.mark.asyncio
    async def test_diff_reports_slip(self, test_session, make_project, make_task):
        """
        Scenario: snapshot, then one task slips 3 days and one finishes a day early
        Expected: one slipped task, total_delta_days 3
        """
        project = await make_project()
        late = await make_task(project, "Late", date(2025, 1, 1), date(2025, 1, 10), estimate_pd=5)
        early = await make_task(project, "Early", date(2025, 1, 1), date(2025, 1, 10), estimate_pd=2)

        baseline = await baseline_service.create_baseline(test_session, project.id, "Plan v1", "tester")

        late.end_date = date(2025, 1, 13)
        late.estimate_pd = 6.5
        early.end_date = date(2025, 1, 9)
        await test_session.flush()

        diff = await baseline_service.diff_baseline(test_session, baseline.id)
        by_title = {item.task_title: item for item in diff.items}

        assert by_title["Late"].delta_days == 3
        assert by_title["Early"].delta_days == -1
        assert diff.summary.slipped_tasks == 1
        assert diff.summary.total_delta_days == 3
        assert diff.summary.delta_pd == pytest.approx(1.5)

    @pytest.mark.asyncio
    async def test_deleted_tasks_left_out_of_diff(self, test_session, make_project, make_task):
        project = await make_project()
        await make_task(project, "Kept", date(2025, 1, 1), date(2025, 1, 2))
        gone = await make_task(project, "Gone", date(2025, 1, 1), date(2025, 1, 2))
        baseline = await baseline_service.create_baseline(test_session, project.id, "Plan", "tester")

        await task_service.delete_task(test_session, gone.id, "tester")

        diff = await baseline_service.diff_baseline(test_session, baseline.id)
        assert [item.task_title for item in diff.items] == ["Kept"]

    @pytest.mark.asyncio
    async def test_baselines_listed_newest_first(self, test_session, make_project):
        project = await make_project()
        await baseline_service.create_baseline(test_session, project.id, "First", "tester")
        await baseline_service.create_baseline(test_session, project.id, "Second", "tester")

        baselines = await baseline_service.list_baselines(test_session, project.id)

        assert [b.name for b in baselines] == ["Second", "First"]
        assert all(b.locked for b in baselines)


class TestTimeLogs:

    @pytest.mark.asyncio
    async def test_actual_pd_sums_logs(self, test_session, make_project, make_task):
        project = await make_project()
        task = await make_task(project, "Work")
        idle = await make_task(project, "Idle")

        await create_time_log(test_session, task.id, TimeLogCreate(work_date=date(2025, 1, 6), pd=0.5), "tester")
        await create_time_log(test_session, task.id, TimeLogCreate(work_date=date(2025, 1, 7), pd=1.0), "tester")

        totals = await actual_pd_by_task(test_session, [task.id, idle.id])
        assert totals == {task.id: pytest.approx(1.5)}

        read = await task_service.get_task(test_session, task.id)
        assert read.actual_pd == pytest.approx(1.5)

    @pytest.mark.asyncio
    async def test_list_filters_by_date(self, test_session, make_project, make_task):
        project = await make_project()
        task = await make_task(project, "Work")
        for day in (5, 6, 7):
            await create_time_log(
                test_session, task.id, TimeLogCreate(work_date=date(2025, 1, day), pd=1), "tester"
            )

        logs = await list_time_logs(test_session, task.id, date(2025, 1, 6), date(2025, 1, 7))

        assert [log.work_date.day for log in logs] == [7, 6]
