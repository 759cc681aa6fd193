"""共享 fixture — 内存版 DDEV 控制器 / 健康源 / 命令执行器

所有外部系统（ddev、docker、宿主机 PATH、time.sleep）都在此替换为内存实现，
编排器和轮询器的测试不需要任何真实容器运行时。

  ┌───────────────┐   exists/configure/start   ┌──────────────────┐
  │ Orchestrator  │──────────────────────────>│ FakeController    │──> registry (模拟 ddev list)
  │  + steps      │   exec/probe/write_file    │  commands / files │
  └──────┬────────┘                            └──────────────────┘
         │ wait_healthy
         v
  ┌───────────────┐   health()   ┌──────────────────┐
  │ReadinessPoller│────────────>│ FakeHealth(序列)  │
  └───────────────┘   sleep()    └──────────────────┘
"""

from __future__ import annotations

from pathlib import Path

import pytest

from devsetup.core.config import Config
from devsetup.core.exceptions import EnvironmentProvisionError, ExecutionError
from devsetup.core.models import HealthStatus, ManagedEnvironment
from devsetup.services.container import ServiceContainer
from devsetup.services.preflight import PreflightChecker
from devsetup.services.readiness import ReadinessPoller
from devsetup.utils.shell import CommandResult

OK = CommandResult(returncode=0, stdout="", stderr="")


# =========================================================================
# 内存实现
# =========================================================================


class FakeController:
    """内存版 EnvironmentController

    registry 模拟 ddev 的全局项目列表，可在多个控制器/多次运行之间共享。
    """

    def __init__(self, name: str, project_dir: Path, registry: dict[str, dict]) -> None:
        self.name = name
        self.project_dir = Path(project_dir)
        self.registry = registry
        self.calls: list[str] = []
        self.commands: list[str] = []
        self.files: dict[str, str] = {}
        self.fail_patterns: list[str] = []
        self.missing_tools: set[str] = set()
        self.configure_fails = False
        self.stop_fails = False

    def exists(self, name: str | None = None) -> bool:
        return (name or self.name) in self.registry

    def stop_and_unlist(self, name: str | None = None) -> CommandResult:
        self.calls.append("stop_and_unlist")
        if self.stop_fails:
            return CommandResult(returncode=1, stdout="", stderr="docker not running")
        self.registry.pop(name or self.name, None)
        return OK

    def configure(self, project_type: str, docroot: str, name: str) -> None:
        self.calls.append("configure")
        if self.configure_fails:
            raise EnvironmentProvisionError("ddev config 失败: boom")
        ddev_dir = self.project_dir / ".ddev"
        ddev_dir.mkdir(parents=True, exist_ok=True)
        (ddev_dir / "config.yaml").write_text(
            f"# ddev config\nname: {name}\ntype: {project_type}\ndocroot: {docroot}\n",
            encoding="utf-8",
        )
        self.registry[name] = {"running": False}

    def start(self) -> None:
        self.calls.append("start")
        self.registry[self.name]["running"] = True

    def exec(self, command: str, *, input: str | None = None) -> CommandResult:  # noqa: A002
        self.commands.append(command)
        for pattern in self.fail_patterns:
            if pattern in command:
                raise ExecutionError(f"容器内命令失败 (rc=1): {command}", returncode=1)
        return OK

    def probe(self, command: str) -> bool:
        self.commands.append(command)
        return not any(command.endswith(f" {t}") for t in self.missing_tools)

    def write_file(self, path: str, content: str) -> None:
        self.exec(f"write {path}")
        self.files[path] = content

    def stop(self) -> CommandResult:
        self.calls.append("stop")
        if self.name in self.registry:
            self.registry[self.name]["running"] = False
        return OK

    def describe(self) -> ManagedEnvironment:
        entry = self.registry.get(self.name)
        if entry is None:
            return ManagedEnvironment(name=self.name, status="absent")
        return ManagedEnvironment(
            name=self.name, directory=str(self.project_dir),
            running=entry["running"],
            status="running" if entry["running"] else "stopped",
        )


class FakeHealth:
    """按序列返回健康状态；序列用尽后重复最后一个；元素为异常时抛出"""

    def __init__(self, sequence: list) -> None:
        self.sequence = list(sequence)
        self.calls = 0

    def health(self, container_ref: str) -> HealthStatus:
        item = self.sequence[min(self.calls, len(self.sequence) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


class FakeSleep:
    """记录 sleep 调用而不真正等待"""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def elapsed(self) -> float:
        return sum(self.calls)


class ScriptedExecutor:
    """按命令前缀返回预设结果的 CommandExecutor"""

    def __init__(self) -> None:
        self.rules: list[tuple[tuple[str, ...], CommandResult]] = []
        self.calls: list[dict] = []

    def on(self, *prefix: str, rc: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.rules.append((prefix, CommandResult(rc, stdout, stderr)))

    def execute(self, cmd, *, cwd=".", env=None, timeout=None, input=None):  # noqa: A002
        args = tuple(cmd) if isinstance(cmd, list) else tuple(cmd.split())
        self.calls.append({"args": args, "cwd": cwd, "input": input})
        for prefix, result in reversed(self.rules):
            if args[:len(prefix)] == prefix:
                return result
        return OK


# =========================================================================
# Fixtures
# =========================================================================


@pytest.fixture()
def ddev_registry() -> dict[str, dict]:
    """模拟 ddev 全局项目列表"""
    return {}


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    return Config(project_name="demo", base_dir=str(tmp_path))


@pytest.fixture()
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture()
def scripted_executor() -> ScriptedExecutor:
    return ScriptedExecutor()


@pytest.fixture()
def make_controller(config: Config, ddev_registry: dict):
    def _make() -> FakeController:
        return FakeController(config.project_name, config.project_dir, ddev_registry)
    return _make


@pytest.fixture()
def make_health():
    return FakeHealth


@pytest.fixture()
def make_container(config: Config, make_controller, fake_sleep: FakeSleep):
    """构造注入全部 fake 的 ServiceContainer

    用法:
        c = make_container()                                   # 全部成功
        c = make_container(health=[HealthStatus.UNHEALTHY])    # 指定健康序列
        c = make_container(missing={"ddev"})                   # 宿主机缺工具
    """
    def _make(
        *, health: list | None = None, missing: set[str] | None = None,
        controller: FakeController | None = None, cfg: Config | None = None,
    ) -> ServiceContainer:
        absent = missing or set()
        source = FakeHealth(health or [HealthStatus.HEALTHY])
        return ServiceContainer(
            cfg or config,
            controller=controller or make_controller(),
            preflight=PreflightChecker(
                which=lambda t: None if t in absent else f"/usr/bin/{t}",
            ),
            health=source,
            poller=ReadinessPoller(source, sleep=fake_sleep),
        )
    return _make
