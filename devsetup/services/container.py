"""服务容器 — 统一依赖注入

流水线步骤通过容器获取控制器、预检器、轮询器等协作者，
同一容器内的实例共享（例如 WorkspaceManager 与步骤使用同一个控制器）。

依赖关系图（→ 表示依赖）:
  workspace → controller
  patches   → controller
  cleanup   → controller
  poller    → health
  controller / health → executor

用法:
    container = ServiceContainer()
    ctrl = container.controller             # 懒加载

    # 测试中注入 fake 实现
    container = ServiceContainer(cfg, controller=FakeController(...))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devsetup.core.config import Config
    from devsetup.core.protocols import (
        EnvironmentController,
        HealthSource,
        WorkspaceProvider,
    )
    from devsetup.services.cleanup import CleanupStage
    from devsetup.services.patches import PatchApplier
    from devsetup.services.preflight import PreflightChecker
    from devsetup.services.readiness import ReadinessPoller
    from devsetup.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器

    接受可选 Config 与预先构造的实例（按属性名注入），其余按需创建。
    """

    def __init__(self, config: Config | None = None, **instances: object) -> None:
        if config is None:
            from devsetup.core.config import get_config
            config = get_config()
        self._config = config
        self._instances: dict[str, object] = dict(instances)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def executor(self) -> CommandExecutor:
        if "executor" not in self._instances:
            from devsetup.utils.shell import get_executor
            self._instances["executor"] = get_executor()
        return self._instances["executor"]  # type: ignore[return-value]

    @property
    def controller(self) -> EnvironmentController:
        if "controller" not in self._instances:
            from devsetup.services.ddev import DdevController
            self._instances["controller"] = DdevController(
                project_name=self._config.project_name,
                project_dir=self._config.project_dir,
                executor=self.executor,
            )
        return self._instances["controller"]  # type: ignore[return-value]

    @property
    def preflight(self) -> PreflightChecker:
        if "preflight" not in self._instances:
            from devsetup.services.preflight import PreflightChecker
            self._instances["preflight"] = PreflightChecker()
        return self._instances["preflight"]  # type: ignore[return-value]

    @property
    def workspace(self) -> WorkspaceProvider:
        if "workspace" not in self._instances:
            from devsetup.services.workspace import WorkspaceManager
            self._instances["workspace"] = WorkspaceManager(self.controller)
        return self._instances["workspace"]  # type: ignore[return-value]

    @property
    def health(self) -> HealthSource:
        if "health" not in self._instances:
            from devsetup.services.readiness import DockerHealthSource
            self._instances["health"] = DockerHealthSource(self.executor)
        return self._instances["health"]  # type: ignore[return-value]

    @property
    def poller(self) -> ReadinessPoller:
        if "poller" not in self._instances:
            from devsetup.services.readiness import ReadinessPoller
            self._instances["poller"] = ReadinessPoller(self.health)
        return self._instances["poller"]  # type: ignore[return-value]

    @property
    def patches(self) -> PatchApplier:
        if "patches" not in self._instances:
            from devsetup.services.patches import PatchApplier
            self._instances["patches"] = PatchApplier(self.controller)
        return self._instances["patches"]  # type: ignore[return-value]

    @property
    def cleanup(self) -> CleanupStage:
        if "cleanup" not in self._instances:
            from devsetup.services.cleanup import CleanupStage
            self._instances["cleanup"] = CleanupStage(
                self.controller, remote_paths=self._config.remote_tmp_dirs,
            )
        return self._instances["cleanup"]  # type: ignore[return-value]
