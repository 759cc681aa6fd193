"""容器就绪轮询

容器运行时只提供时点查询（docker inspect），没有推送通知，
因此以固定间隔采样、累计等待时间的方式判断 web 容器是否就绪。
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from devsetup.core.exceptions import DevSetupError
from devsetup.core.models import HealthStatus
from devsetup.utils.shell import CommandExecutor, get_executor

if TYPE_CHECKING:
    from devsetup.core.protocols import HealthSource

logger = logging.getLogger(__name__)


class DockerHealthSource:
    """通过 docker inspect 读取容器健康状态"""

    def __init__(self, executor: CommandExecutor | None = None) -> None:
        self._executor = executor or get_executor()

    def health(self, container_ref: str) -> HealthStatus:
        r = self._executor.execute([
            "docker", "inspect",
            "--format", "{{.State.Health.Status}}", container_ref,
        ])
        if not r.success:
            # 容器尚未创建或未定义 healthcheck
            return HealthStatus.UNKNOWN
        return HealthStatus.parse(r.stdout)


class ReadinessPoller:
    """有界健康轮询器"""

    def __init__(
        self,
        source: HealthSource,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._source = source
        self._sleep = sleep

    def _sample(self, container_ref: str) -> HealthStatus:
        try:
            return self._source.health(container_ref)
        except (DevSetupError, OSError) as e:
            logger.debug("健康查询失败，按启动中处理: %s", e)
            return HealthStatus.STARTING

    def wait_healthy(
        self, container_ref: str, max_wait_seconds: int, interval_seconds: int,
    ) -> HealthStatus:
        """轮询直到 healthy / unhealthy，或累计等待达到上限返回 TIMED_OUT"""
        waited = 0
        while waited < max_wait_seconds:
            status = self._sample(container_ref)
            if status.terminal:
                # 明确的 unhealthy 视为权威结论，不再重试
                if status is HealthStatus.HEALTHY:
                    logger.info("容器已就绪: %s", container_ref)
                else:
                    logger.warning("容器报告 unhealthy: %s", container_ref)
                return status
            logger.info("等待容器 %s ... (%d/%d 秒)",
                        container_ref, waited, max_wait_seconds)
            self._sleep(interval_seconds)
            waited += interval_seconds

        logger.warning("容器 %s 在 %d 秒内未就绪", container_ref, max_wait_seconds)
        return HealthStatus.TIMED_OUT
