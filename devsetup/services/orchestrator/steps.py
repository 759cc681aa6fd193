"""装配步骤实现

步骤顺序：
1. check_host_dependencies - 宿主机工具预检
2. clean_project - 重置项目目录
3. create_ddev_project - ddev config + start
4. wait_web_container - 等待 web 容器就绪
5. install_container_tools - 容器内工具前置条件
6. install_laravel - composer create-project
7. ensure_package_json - npm init
8. install_node_dependencies - 前端依赖
9. install_ide_helpers - IDE Helper
10. append_ddev_ports - 暴露 Vite 端口
11. replace_vite_config - 替换 vite.config.js
12. apply_patch:<name> - 可选补丁
13. add_npm_scripts - 注册 npm 脚本
14. final_cleanup - 清理临时文件
"""

from __future__ import annotations

import logging
import shlex
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from devsetup.core.exceptions import (
    ExecutionError,
    InstallStepError,
    ReadinessError,
    StepSkipped,
)
from devsetup.core.models import Criticality, HealthStatus
from devsetup.services.orchestrator.models import Step
from devsetup.utils.yaml_io import append_yaml, load_yaml

if TYPE_CHECKING:
    from devsetup.services.container import ServiceContainer
    from devsetup.services.orchestrator.models import StepContext

logger = logging.getLogger(__name__)

FATAL = Criticality.FATAL
RECOVERABLE = Criticality.RECOVERABLE

LARAVEL_TMP = "/tmp/laravel-temp"
RESOURCE_TMP = "/tmp/resources"

# Vite 需要存在的入口文件
FRONTEND_FILES = (
    "resources/css/app.css", "resources/js/app.js",
    "vite.config.js", "package.json",
)


class ProvisionSteps:
    """装配步骤集合"""

    def __init__(self, container: ServiceContainer) -> None:
        self.c = container

    def build(self) -> list[Step]:
        """按固定顺序组装步骤列表"""
        steps = [
            Step("check_host_dependencies", self.check_host_dependencies, FATAL,
                 "检查宿主机依赖"),
            Step("clean_project", self.clean_project, FATAL, "准备干净的项目目录"),
            Step("create_ddev_project", self.create_ddev_project, FATAL,
                 "创建 DDEV 项目"),
            Step("wait_web_container", self.wait_web_container, RECOVERABLE,
                 "等待 web 容器就绪"),
            Step("install_container_tools", self.install_container_tools, FATAL,
                 "安装容器内工具"),
            Step("install_laravel", self.install_laravel, FATAL, "安装 Laravel"),
            Step("ensure_package_json", self.ensure_package_json, FATAL,
                 "确保 package.json 存在"),
            Step("install_node_dependencies", self.install_node_dependencies,
                 RECOVERABLE, "安装 Node 依赖"),
            Step("install_ide_helpers", self.install_ide_helpers, RECOVERABLE,
                 "安装 Laravel IDE Helper"),
            Step("append_ddev_ports", self.append_ddev_ports, RECOVERABLE,
                 "追加 DDEV 额外端口"),
            Step("replace_vite_config", self.replace_vite_config, RECOVERABLE,
                 "替换 vite.config.js"),
        ]
        for patch in self.c.config.patches:
            steps.append(Step(
                f"apply_patch:{patch}", partial(self.apply_patch, patch),
                RECOVERABLE, f"应用补丁 {patch}",
            ))
        steps += [
            Step("add_npm_scripts", self.add_npm_scripts, RECOVERABLE,
                 "注册 npm 脚本"),
            Step("final_cleanup", self.final_cleanup, RECOVERABLE, "清理临时文件"),
        ]
        return steps

    # ---- 容器内执行辅助 ----

    def _app_exec(self, command: str) -> None:
        """在应用根目录下执行命令"""
        app = shlex.quote(self.c.config.app_root)
        self.c.controller.exec(f"cd {app} && {command}")

    def _install(self, what: str, command: str) -> None:
        try:
            self._app_exec(command)
        except ExecutionError as e:
            raise InstallStepError(f"{what}: {e}") from e

    # ---- 步骤 ----

    def check_host_dependencies(self, ctx: StepContext) -> str:
        tools = ctx.config.host_tools
        self.c.preflight.verify(tools)
        return ", ".join(tools)

    def clean_project(self, ctx: StepContext) -> str:
        cfg = ctx.config
        ctx.workspace = self.c.workspace.reset(
            cfg.project_name, cfg.project_dir.parent,
        )
        # 宿主机暂存目录在收尾阶段删除
        ctx.host_artifacts.extend(cfg.host_tmp_paths)
        return str(ctx.workspace)

    def create_ddev_project(self, ctx: StepContext) -> None:
        cfg = ctx.config
        ctrl = self.c.controller
        ctrl.configure(cfg.project_type, cfg.docroot, cfg.project_name)
        ctrl.start()

    def wait_web_container(self, ctx: StepContext) -> str:
        cfg = ctx.config
        status = self.c.poller.wait_healthy(
            cfg.web_container, cfg.health_max_wait, cfg.health_interval,
        )
        if status is not HealthStatus.HEALTHY:
            raise ReadinessError(cfg.web_container, status)
        return status.value

    def install_container_tools(self, ctx: StepContext) -> str:
        ctrl = self.c.controller
        installed: list[str] = []
        for tool in ctx.config.container_tools:
            if ctrl.probe(f"command -v {shlex.quote(tool)}"):
                continue
            logger.info("安装缺失的容器工具: %s", tool)
            try:
                ctrl.exec(
                    "apt-get update && apt-get install -y " + shlex.quote(tool),
                )
            except ExecutionError as e:
                raise InstallStepError(f"安装 {tool} 失败: {e}") from e
            installed.append(tool)
        return "installed: " + ", ".join(installed) if installed else "all present"

    def install_laravel(self, ctx: StepContext) -> None:
        cfg = ctx.config
        ctrl = self.c.controller
        tmp = shlex.quote(LARAVEL_TMP)
        package = shlex.quote(f"laravel/laravel:{cfg.laravel_version}")
        try:
            ctrl.exec(f"rm -rf {tmp} && mkdir -p {tmp}")
            ctrl.exec(f"composer create-project {package} {tmp}")
            ctrl.exec(
                f"rsync -a {LARAVEL_TMP}/ {shlex.quote(cfg.app_root.rstrip('/') + '/')}",
            )
        except ExecutionError as e:
            raise InstallStepError(f"Laravel 安装失败: {e}") from e

    def ensure_package_json(self, ctx: StepContext) -> None:
        self._install("确保 package.json", "[ -f package.json ] || npm init -y")

    def install_node_dependencies(self, ctx: StepContext) -> None:
        touch = " && ".join(
            f"{{ [ -f {shlex.quote(f)} ] || touch {shlex.quote(f)}; }}"
            for f in FRONTEND_FILES
        )
        self._install("准备前端入口文件", f"mkdir -p resources/css resources/js && {touch}")
        packages = " ".join(shlex.quote(p) for p in ctx.config.node_dev_packages)
        if packages:
            self._install(
                "安装前端开发依赖",
                f"npm install --save-dev {packages} --legacy-peer-deps",
            )
        self._install("npm install", "npm install --legacy-peer-deps")

    def install_ide_helpers(self, ctx: StepContext) -> None:
        package = shlex.quote(ctx.config.ide_helper_package)
        self._install(
            "IDE Helper",
            f"composer require --dev {package}"
            " && php artisan ide-helper:generate"
            " && php artisan ide-helper:models --nowrite"
            " && php artisan ide-helper:meta",
        )

    def append_ddev_ports(self, ctx: StepContext) -> str:
        cfg = ctx.config
        workspace = ctx.workspace or cfg.project_dir
        config_file = workspace / ".ddev" / "config.yaml"
        if not config_file.exists():
            raise InstallStepError(f"DDEV 配置文件不存在: {config_file}")
        try:
            if "web_extra_exposed_ports" in load_yaml(config_file):
                return "already present"
            append_yaml(config_file, {"web_extra_exposed_ports": [{
                "name": "node-vite",
                "container_port": cfg.vite_container_port,
                "http_port": cfg.vite_http_port,
                "https_port": cfg.vite_https_port,
            }]})
        except (yaml.YAMLError, ValueError) as e:
            raise InstallStepError(f"无法更新 {config_file}: {e}") from e
        logger.info("已追加 Vite 端口到 %s（ddev restart 后生效）", config_file)
        return str(config_file)

    def replace_vite_config(self, ctx: StepContext) -> None:
        source = Path(ctx.config.resource_dir) / "vite.config.js"
        if not source.is_file():
            raise StepSkipped(f"资源不存在: {source}")
        try:
            content = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InstallStepError(f"无法读取 {source}: {e}") from e
        staged = f"{RESOURCE_TMP}/vite.config.js"
        target = shlex.quote(ctx.config.app_root.rstrip("/") + "/vite.config.js")
        try:
            self.c.controller.write_file(staged, content)
            self.c.controller.exec(f"cp {staged} {target}")
        except ExecutionError as e:
            raise InstallStepError(f"替换 vite.config.js 失败: {e}") from e

    def apply_patch(self, patch: str, ctx: StepContext) -> str:
        payload = ctx.config.patch_dir / patch
        if not payload.is_file():
            raise StepSkipped(f"补丁不存在: {payload}")
        job = self.c.patches.apply(payload, ctx.config.app_root)
        return job.staged_path

    def add_npm_scripts(self, ctx: StepContext) -> str:
        scripts = ctx.config.npm_scripts
        if not scripts:
            raise StepSkipped("未配置 npm 脚本")
        pairs = " ".join(
            shlex.quote(f"scripts.{name}={cmd}") for name, cmd in scripts.items()
        )
        self._install("注册 npm 脚本", f"npm pkg set {pairs}")
        return ", ".join(scripts)

    def final_cleanup(self, ctx: StepContext) -> None:
        self.c.cleanup.cleanup(ctx.host_artifacts)
