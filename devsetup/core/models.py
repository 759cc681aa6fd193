"""核心数据模型

受管环境、健康状态、补丁任务等领域实体集中定义。
流水线相关的 Step / RunReport / StepContext 见 services/orchestrator/models.py。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Criticality(str, Enum):
    """步骤失败的严重程度"""
    FATAL = "fatal"
    RECOVERABLE = "recoverable"


class HealthStatus(str, Enum):
    """容器健康状态"""
    STARTING = "starting"
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"  # 容器不存在或无法查询
    TIMED_OUT = "timed_out"  # 轮询器专用：超时仍无终态

    @property
    def terminal(self) -> bool:
        return self in (HealthStatus.HEALTHY, HealthStatus.UNHEALTHY)

    @classmethod
    def parse(cls, raw: str) -> HealthStatus:
        """解析 docker / ddev 报告的状态字符串，无法识别的归为 UNKNOWN"""
        value = raw.strip().strip('"').lower()
        for status in (cls.STARTING, cls.HEALTHY, cls.UNHEALTHY):
            if value == status.value:
                return status
        return cls.UNKNOWN


@dataclass
class ManagedEnvironment:
    """DDEV 受管环境快照（由 EnvironmentController 生成，只读）"""

    name: str
    directory: str = ""
    running: bool = False
    status: str = ""
    health: dict[str, HealthStatus] = field(default_factory=dict)
    urls: list[str] = field(default_factory=list)


@dataclass
class PatchJob:
    """单次补丁应用任务，仅在 PatchApplier.apply 期间存在"""

    source: Path
    target_dir: str
    staged_path: str = ""

    @property
    def name(self) -> str:
        return self.source.name
