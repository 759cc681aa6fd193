"""步骤流水线编排器

职责：
- 按顺序执行步骤，前一步返回后才开始下一步
- Fatal 失败立即中止（后续步骤包括清理都不执行）
- Recoverable 失败记录告警后继续
- 不做自动重试；重跑整个流水线即为恢复手段
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from devsetup.core.exceptions import DevSetupError, StepFailedError, StepSkipped
from devsetup.services.container import ServiceContainer
from devsetup.services.orchestrator.models import RunReport, Step, StepContext
from devsetup.services.orchestrator.steps import ProvisionSteps

logger = logging.getLogger(__name__)


class Orchestrator:
    """装配流水线编排器"""

    def __init__(self, container: ServiceContainer | None = None) -> None:
        self.c = container or ServiceContainer()

    def plan(self) -> list[Step]:
        """标准装配步骤列表"""
        return ProvisionSteps(self.c).build()

    def provision(self) -> RunReport:
        """执行标准装配流程"""
        ctx = StepContext(config=self.c.config)
        return self.run(self.plan(), ctx)

    def run(self, steps: Sequence[Step], ctx: StepContext) -> RunReport:
        """执行步骤序列，返回冻结的运行报告

        Fatal 步骤失败时抛 StepFailedError（携带步骤名、原因和报告）。
        """
        report = ctx.report = RunReport()
        total = len(steps)

        for i, step in enumerate(steps, 1):
            logger.info("[Step %d/%d] %s", i, total, step.description or step.name)
            try:
                detail = step.action(ctx) or ""
            except StepSkipped as e:
                report.record_skip(step.name, str(e))
                logger.info("[Step %d/%d] %s 已跳过: %s", i, total, step.name, e)
                continue
            except (DevSetupError, OSError) as e:
                report.record_failure(step.name, str(e))
                if step.fatal:
                    report.abort(step.name)
                    report.finalize()
                    logger.error("%s 失败，流水线中止: %s", step.name, e)
                    raise StepFailedError(step.name, e, report) from e
                logger.warning("%s 失败（可恢复，继续）: %s", step.name, e)
                continue
            report.record_success(step.name, detail)

        report.finalize()
        logger.info(
            "流水线完成: 成功=%d, 可恢复失败=%d, 跳过=%d",
            len(report.succeeded), len(report.failed), len(report.skipped),
        )
        return report
