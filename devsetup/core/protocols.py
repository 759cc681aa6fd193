"""领域协议定义

集中定义编排器与外部系统之间的接口契约（Protocol），
真实实现调用 ddev / docker，测试实现完全在内存中运行。

使用 typing.Protocol 而非 ABC，使 fake 实现无需继承即可满足协议。
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from devsetup.core.models import HealthStatus, ManagedEnvironment
from devsetup.utils.shell import CommandResult


# =========================================================================
# 环境控制协议
# =========================================================================

class EnvironmentController(Protocol):
    """受管环境控制器协议

    每个方法都是对环境管理器的一次同步调用。
    configure / start 失败抛 EnvironmentProvisionError；
    exec 非零退出抛 ExecutionError，由调用方步骤决定 Fatal 与否。
    """

    def exists(self, name: str | None = None) -> bool:
        """环境管理器中是否已登记名为 name 的环境（默认为绑定的项目）"""
        ...

    def stop_and_unlist(self, name: str | None = None) -> CommandResult:
        """停止并注销名为 name 的环境（默认为绑定的项目）"""
        ...

    def configure(self, project_type: str, docroot: str, name: str) -> None:
        """在项目目录创建环境配置"""
        ...

    def start(self) -> None:
        """启动环境"""
        ...

    def exec(self, command: str, *, input: str | None = None) -> CommandResult:  # noqa: A002
        """在运行中的环境里执行 shell 命令"""
        ...

    def probe(self, command: str) -> bool:
        """执行命令并只返回是否成功（不抛异常）"""
        ...

    def write_file(self, path: str, content: str) -> None:
        """把内容写入环境内的文件（自动创建父目录）"""
        ...

    def stop(self) -> CommandResult:
        """停止环境"""
        ...

    def describe(self) -> ManagedEnvironment:
        """查询环境当前状态"""
        ...


# =========================================================================
# 工作空间协议
# =========================================================================

class WorkspaceProvider(Protocol):
    """项目工作目录提供者协议"""

    def reset(self, project_name: str, base_dir: str | Path) -> Path:
        """保证 base_dir/project_name 为全新空目录，返回其路径"""
        ...


# =========================================================================
# 健康状态源协议
# =========================================================================

class HealthSource(Protocol):
    """容器健康状态源：每次调用都必须发起一次新的查询"""

    def health(self, container_ref: str) -> HealthStatus:
        """查询容器当前健康状态"""
        ...
