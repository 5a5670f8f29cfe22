"""
顺序写入执行器

数据存储不提供多语句事务，一个业务操作拆成若干按顺序独立提交的写入步骤。
关键步骤失败直接抛出；非关键步骤 (对话记录、通知) 失败时回滚该步骤、记录日志并继续。
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List

logger = logging.getLogger(__name__)


@dataclass
class WriteStep:
    """单个写入步骤"""

    name: str
    action: Callable[[], Awaitable[Any]]
    critical: bool = False


@dataclass
class StepReport:
    """执行结果"""

    results: Dict[str, Any] = field(default_factory=dict)
    completed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def fully_applied(self) -> bool:
        return not self.failed


class StepRunner:
    """按顺序执行写入步骤，每步独立提交"""

    def __init__(
        self,
        commit: Callable[[], Awaitable[None]],
        rollback: Callable[[], Awaitable[None]],
        operation: str = "operation"
    ):
        self.commit = commit
        self.rollback = rollback
        self.operation = operation

    async def run(self, steps: List[WriteStep]) -> StepReport:
        report = StepReport()
        for step in steps:
            try:
                report.results[step.name] = await step.action()
                await self.commit()
                report.completed.append(step.name)
            except Exception as e:
                await self.rollback()
                if step.critical:
                    logger.error(f"{self.operation}: 关键步骤 {step.name} 失败: {e}")
                    raise
                report.failed.append(step.name)
                logger.warning(f"{self.operation}: 步骤 {step.name} 失败，已跳过: {e}")
        return report
