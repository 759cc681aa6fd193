"""编排器数据模型

数据类：
- Step: 命名步骤 + 动作 + 严重程度
- RunReport: 运行报告（运行中只追加，结束后冻结）
- StepContext: 显式传递给每个步骤的运行上下文
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from devsetup.core.models import Criticality

if TYPE_CHECKING:
    from collections.abc import Callable

    from devsetup.core.config import Config

    # 步骤动作：接收上下文，可返回一段简短说明
    StepAction = Callable[["StepContext"], str | None]


@dataclass(frozen=True)
class Step:
    """流水线中的单个步骤"""

    name: str
    action: StepAction
    criticality: Criticality = Criticality.FATAL
    description: str = ""

    @property
    def fatal(self) -> bool:
        return self.criticality is Criticality.FATAL


@dataclass
class RunReport:
    """流水线运行报告

    succeeded / failed 恰好划分所有被尝试的步骤；
    skipped 记录因可选前置条件缺失而跳过的步骤，不算失败。
    """

    _succeeded: list[str] = field(default_factory=list)
    _failed: list[str] = field(default_factory=list)
    _skipped: list[str] = field(default_factory=list)
    details: dict[str, str] = field(default_factory=dict)
    aborted_step: str = ""
    finished: bool = False

    @property
    def succeeded(self) -> tuple[str, ...]:
        return tuple(self._succeeded)

    @property
    def failed(self) -> tuple[str, ...]:
        return tuple(self._failed)

    @property
    def skipped(self) -> tuple[str, ...]:
        return tuple(self._skipped)

    @property
    def attempted(self) -> tuple[str, ...]:
        return self.succeeded + self.failed

    @property
    def success(self) -> bool:
        return self.finished and not self.aborted_step

    def _check_open(self) -> None:
        if self.finished:
            raise RuntimeError("RunReport 已冻结，不能再追加")

    def record_success(self, name: str, detail: str = "") -> None:
        self._check_open()
        self._succeeded.append(name)
        if detail:
            self.details[name] = detail

    def record_failure(self, name: str, detail: str = "") -> None:
        self._check_open()
        self._failed.append(name)
        if detail:
            self.details[name] = detail

    def record_skip(self, name: str, detail: str = "") -> None:
        self._check_open()
        self._skipped.append(name)
        if detail:
            self.details[name] = detail

    def abort(self, name: str) -> None:
        self._check_open()
        self.aborted_step = name

    def finalize(self) -> RunReport:
        self.finished = True
        return self


@dataclass
class StepContext:
    """运行上下文：替代全局变量与当前工作目录"""

    config: Config
    report: RunReport = field(default_factory=RunReport)
    workspace: Path | None = None
    host_artifacts: list[Path] = field(default_factory=list)
