"""集中配置管理

提供统一的配置入口：YAML 文件加载 + 环境变量覆盖。
运行时只识别两个环境变量：PROJECT_NAME、BASE_DIR。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml

from devsetup.core.exceptions import ConfigError
from devsetup.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "devsetup.yml"

# 包内自带的资源目录（vite.config.js、patches/）
PACKAGE_RESOURCE_DIR = str(Path(__file__).resolve().parent.parent / "resources")


@dataclass
class Config:
    """装配流程全局配置"""

    # 项目
    project_name: str = "my-new-app"
    base_dir: str = ""  # 为空时取当前目录
    project_type: str = "laravel"
    docroot: str = "public"
    app_root: str = "/var/www/html"
    laravel_version: str = "^12"

    # 工具
    host_tools: list[str] = field(default_factory=lambda: ["ddev", "docker"])
    container_tools: list[str] = field(
        default_factory=lambda: ["jq", "npm", "php"],
    )
    node_dev_packages: list[str] = field(default_factory=lambda: [
        "tailwindcss", "postcss", "autoprefixer", "prettier",
        "prettier-plugin-blade", "prettier-plugin-tailwindcss",
    ])
    ide_helper_package: str = "barryvdh/laravel-ide-helper"

    # Vite 端口暴露
    vite_container_port: int = 5173
    vite_http_port: int = 5172
    vite_https_port: int = 5173

    # 健康检查（秒）
    health_max_wait: int = 180
    health_interval: int = 5

    # 资源与补丁
    resource_dir: str = PACKAGE_RESOURCE_DIR
    patches: list[str] = field(default_factory=lambda: ["prettierrc.patch"])
    npm_scripts: dict[str, str] = field(default_factory=lambda: {
        "format": "npx prettier --write resources/",
        "helpers": (
            "php artisan ide-helper:generate && php artisan ide-helper:models"
            " && php artisan ide-helper:meta"
        ),
    })

    # 清理
    remote_tmp_dirs: list[str] = field(default_factory=lambda: [
        "/tmp/base_scaffold", "/tmp/laravel-temp",
        "/tmp/resources", "/tmp/patches",
    ])
    # 宿主机临时目录，相对路径按项目父目录解析
    host_tmp_dirs: list[str] = field(default_factory=lambda: ["base_scaffold"])

    # 放不到字段里的配置项
    extra: dict = field(default_factory=dict)

    @property
    def project_dir(self) -> Path:
        return Path(self.base_dir or os.getcwd()) / self.project_name

    @property
    def web_container(self) -> str:
        """DDEV 为项目创建的 web 容器名"""
        return f"ddev-{self.project_name}-web"

    @property
    def patch_dir(self) -> Path:
        return Path(self.resource_dir) / "patches"

    @property
    def host_tmp_paths(self) -> list[Path]:
        base = self.project_dir.parent
        return [base / p for p in self.host_tmp_dirs]

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"无法读取配置文件 {path}: {e}") from e
        if not data:
            return cls()
        known = {f for f in cls.__dataclass_fields__ if f != "extra"}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置文件内容无效 {path}: {e}") from e
        cfg.extra = extra
        return cfg

    def with_env(self, environ: dict[str, str] | None = None) -> Config:
        """叠加 PROJECT_NAME / BASE_DIR 环境变量，返回新配置"""
        env = os.environ if environ is None else environ
        overrides = {}
        if env.get("PROJECT_NAME"):
            overrides["project_name"] = env["PROJECT_NAME"]
        if env.get("BASE_DIR"):
            overrides["base_dir"] = env["BASE_DIR"]
        return replace(self, **overrides) if overrides else self

    def validate(self) -> None:
        if not self.project_name or "/" in self.project_name:
            raise ConfigError(f"非法项目名: {self.project_name!r}")
        if self.health_interval <= 0 or self.health_max_wait < 0:
            raise ConfigError("health_interval 必须为正数，health_max_wait 不能为负")


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值 + 环境变量）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config().with_env()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE, **overrides: str) -> Config:
    """从文件初始化全局配置，环境变量与显式参数依次覆盖"""
    global _current  # noqa: PLW0603
    cfg = Config.from_file(path).with_env()
    given = {k: v for k, v in overrides.items() if v}
    if given:
        cfg = replace(cfg, **given)
    cfg.validate()
    _current = cfg
    logger.debug("配置已加载: %s (project=%s)", path, cfg.project_name)
    return _current
