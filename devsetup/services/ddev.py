"""DDEV 环境控制器

职责:
- 对 ddev CLI 的薄代理：config / start / exec / stop / list / describe
- 把 ddev 的退出码翻译为领域异常
- 不做任何重试，失败信号完全依赖 ddev 自身
"""

from __future__ import annotations

import json
import logging
import posixpath
import shlex
from pathlib import Path
from typing import Any

from devsetup.core.exceptions import EnvironmentProvisionError, ExecutionError
from devsetup.core.models import HealthStatus, ManagedEnvironment
from devsetup.utils.shell import CommandExecutor, CommandResult, get_executor

logger = logging.getLogger(__name__)


def _parse_raw(stdout: str) -> Any:
    """解析 ddev --json-output 输出，返回 raw 字段

    ddev 输出为单个 JSON 对象，也可能是多行日志 JSON，raw 在最后一条。
    """
    raw: Any = None
    for line in stdout.splitlines() or [stdout]:
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict) and "raw" in data:
            raw = data["raw"]
        elif isinstance(data, dict) and "projects" in data:
            raw = data["projects"]
    if raw is None:
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError:
            return None
        raw = data.get("raw", data.get("projects")) if isinstance(data, dict) else None
    return raw


class DdevController:
    """DDEV 命令代理（EnvironmentController 的真实实现）"""

    def __init__(
        self,
        project_name: str,
        project_dir: str | Path,
        executor: CommandExecutor | None = None,
        binary: str = "ddev",
    ) -> None:
        self.project_name = project_name
        self.project_dir = Path(project_dir)
        self._executor = executor or get_executor()
        self._binary = binary

    def _ddev(
        self, *args: str, input: str | None = None,  # noqa: A002
        in_project: bool = True,
    ) -> CommandResult:
        cwd = str(self.project_dir) if in_project and self.project_dir.is_dir() else "."
        return self._executor.execute(
            [self._binary, *args], cwd=cwd, input=input,
        )

    # ---- 查询 ----

    def exists(self, name: str | None = None) -> bool:
        """ddev list 中是否已有名为 name 的项目"""
        name = name or self.project_name
        r = self._ddev("list", "--json-output", in_project=False)
        if not r.success:
            logger.debug("ddev list 失败: %s", r.brief())
            return False
        projects = _parse_raw(r.stdout) or []
        return any(
            isinstance(p, dict) and p.get("name") == name
            for p in projects
        )

    def describe(self) -> ManagedEnvironment:
        """ddev describe 快照；项目不存在时返回 running=False 的空快照"""
        r = self._ddev("describe", "--json-output", self.project_name, in_project=False)
        raw = _parse_raw(r.stdout) if r.success else None
        if not isinstance(raw, dict):
            return ManagedEnvironment(name=self.project_name, status="absent")
        services = raw.get("services") or {}
        health = {
            svc.get("full_name", name): HealthStatus.parse(
                str(svc.get("health") or svc.get("status", "")),
            )
            for name, svc in services.items()
            if isinstance(svc, dict)
        }
        status = str(raw.get("status", ""))
        return ManagedEnvironment(
            name=raw.get("name", self.project_name),
            directory=raw.get("approot", str(self.project_dir)),
            running=status == "running",
            status=status,
            health=health,
            urls=list(raw.get("urls") or []),
        )

    # ---- 生命周期 ----

    def stop_and_unlist(self, name: str | None = None) -> CommandResult:
        name = name or self.project_name
        logger.info("停止并注销已有 DDEV 项目: %s", name)
        return self._ddev("stop", "--unlist", name, in_project=False)

    def configure(self, project_type: str, docroot: str, name: str) -> None:
        r = self._ddev(
            "config",
            f"--project-type={project_type}",
            f"--docroot={docroot}",
            f"--project-name={name}",
        )
        if not r.success:
            raise EnvironmentProvisionError(f"ddev config 失败: {r.brief()}")
        logger.info("DDEV 项目已配置: %s (type=%s, docroot=%s)",
                    name, project_type, docroot)

    def start(self) -> None:
        r = self._ddev("start")
        if not r.success:
            raise EnvironmentProvisionError(f"ddev start 失败: {r.brief()}")
        logger.info("DDEV 项目已启动: %s", self.project_name)

    def stop(self) -> CommandResult:
        return self._ddev("stop", self.project_name, in_project=False)

    # ---- 容器内执行 ----

    def exec(self, command: str, *, input: str | None = None) -> CommandResult:  # noqa: A002
        """ddev exec bash -c <command>，非零退出抛 ExecutionError"""
        logger.debug("ddev exec: %s", command)
        r = self._ddev("exec", "bash", "-c", command, input=input)
        if not r.success:
            raise ExecutionError(
                f"容器内命令失败 (rc={r.returncode}): {command}\n{r.brief()}",
                returncode=r.returncode,
            )
        return r

    def probe(self, command: str) -> bool:
        return self._ddev("exec", "bash", "-c", command).success

    def write_file(self, path: str, content: str) -> None:
        parent = posixpath.dirname(path) or "/"
        self.exec(
            f"mkdir -p {shlex.quote(parent)} && cat > {shlex.quote(path)}",
            input=content,
        )
