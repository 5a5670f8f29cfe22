"""
顺序写入执行器测试
"""

import pytest
from unittest.mock import AsyncMock

from printshop.services.write_steps import StepRunner, WriteStep


@pytest.mark.asyncio
class TestStepRunner:
    """StepRunner测试类"""

    @pytest.fixture
    def session(self):
        return AsyncMock(), AsyncMock()

    async def test_each_step_committed(self, session):
        commit, rollback = session
        runner = StepRunner(commit, rollback, "test")

        report = await runner.run([
            WriteStep("a", AsyncMock(return_value=1), critical=True),
            WriteStep("b", AsyncMock(return_value=2)),
        ])

        assert report.results == {"a": 1, "b": 2}
        assert report.completed == ["a", "b"]
        assert report.fully_applied is True
        assert commit.await_count == 2
        rollback.assert_not_awaited()

    async def test_critical_failure_stops_run(self, session):
        commit, rollback = session
        later = AsyncMock()
        runner = StepRunner(commit, rollback, "test")

        with pytest.raises(ValueError):
            await runner.run([
                WriteStep("status", AsyncMock(side_effect=ValueError("boom")), critical=True),
                WriteStep("message", later),
            ])

        rollback.assert_awaited_once()
        commit.assert_not_awaited()
        later.assert_not_awaited()

    async def test_secondary_failure_is_skipped(self, session):
        commit, rollback = session
        runner = StepRunner(commit, rollback, "test")
        notify = AsyncMock(return_value="n1")

        report = await runner.run([
            WriteStep("status", AsyncMock(return_value="ok"), critical=True),
            WriteStep("message", AsyncMock(side_effect=RuntimeError("db down"))),
            WriteStep("notification", notify),
        ])

        assert report.completed == ["status", "notification"]
        assert report.failed == ["message"]
        assert report.fully_applied is False
        assert report.results["notification"] == "n1"
        rollback.assert_awaited_once()
