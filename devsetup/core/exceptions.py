"""统一异常体系

所有业务异常继承 DevSetupError。编排器据此区分"步骤失败"与程序缺陷：
只有 DevSetupError（及文件系统 OSError）会被归类为 Fatal / Recoverable，
其余异常原样向上抛出。CLI 层据此输出友好提示并以非零状态退出。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devsetup.core.models import HealthStatus
    from devsetup.services.orchestrator.models import RunReport


class DevSetupError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(DevSetupError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class MissingDependencyError(DevSetupError):
    """宿主机缺少必需工具（预检阶段，总是 Fatal）"""

    code = "MISSING_DEPENDENCY"

    def __init__(self, tool: str) -> None:
        super().__init__(f"宿主机未安装 {tool}")
        self.tool = tool


class WorkspaceError(DevSetupError):
    """项目目录无法删除/创建"""

    code = "WORKSPACE_ERROR"


class EnvironmentProvisionError(DevSetupError):
    """DDEV 环境 config / start 失败"""

    code = "ENV_PROVISION_ERROR"


class ExecutionError(DevSetupError):
    """外部命令以非零状态退出"""

    code = "EXECUTION_ERROR"

    def __init__(self, message: str, returncode: int = -1) -> None:
        super().__init__(message)
        self.returncode = returncode


class ReadinessError(DevSetupError):
    """容器未在限定时间内报告 healthy"""

    code = "READINESS_ERROR"

    def __init__(self, container: str, status: HealthStatus) -> None:
        super().__init__(f"容器 {container} 状态: {status.value}")
        self.container = container
        self.status = status


class InstallStepError(DevSetupError):
    """容器内安装/脚手架步骤失败"""

    code = "INSTALL_ERROR"


class PatchError(DevSetupError):
    """补丁暂存或应用失败"""

    code = "PATCH_ERROR"


class StepFailedError(DevSetupError):
    """Fatal 步骤失败，流水线已中止"""

    code = "STEP_FAILED"

    def __init__(
        self, step: str, cause: BaseException, report: RunReport | None = None,
    ) -> None:
        super().__init__(f"{step} 失败: {cause}")
        self.step = step
        self.cause = cause
        self.report = report


class StepSkipped(Exception):  # noqa: N818
    """步骤前置条件不存在（如可选补丁文件缺失），跳过而非失败"""
