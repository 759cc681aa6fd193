"""devsetup 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click

from devsetup import __version__
from devsetup.core.config import DEFAULT_CONFIG_FILE, init_config
from devsetup.services.container import ServiceContainer
from devsetup.utils.logger import setup_logging


def _container(config: str, project_name: str = "", base_dir: str = "") -> ServiceContainer:
    """加载配置并构造服务容器"""
    cfg = init_config(config, project_name=project_name, base_dir=base_dir)
    return ServiceContainer(cfg)


config_option = click.option(
    "--config", "-c", default=DEFAULT_CONFIG_FILE, show_default=True,
    help="YAML 配置文件（不存在则使用默认值）",
)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """devsetup - DDEV + Laravel 本地开发环境装配工具"""
    setup_logging(
        level=os.getenv("DEVSETUP_LOG_LEVEL", "INFO"),
        json_output=os.getenv("DEVSETUP_LOG_JSON", "") == "1",
    )


# 注册各领域子命令
from devsetup.cli.cmd_provision import register as _reg_provision  # noqa: E402
from devsetup.cli.cmd_env import register as _reg_env  # noqa: E402

_reg_provision(main)
_reg_env(main)
