"""CLI — 受管环境查询与停止"""

from __future__ import annotations

import sys

import click

from devsetup.cli import _container, config_option


def register(group: click.Group) -> None:
    group.add_command(status)
    group.add_command(stop)


@click.command()
@config_option
def status(config: str) -> None:
    """查看 DDEV 项目状态"""
    env = _container(config).controller.describe()
    if env.status == "absent":
        click.echo(f"项目未登记: {env.name}")
        return
    click.echo(f"项目: {env.name}  状态: {env.status}  目录: {env.directory}")
    for container, health in sorted(env.health.items()):
        click.echo(f"  {container:32s} {health.value}")
    for url in env.urls:
        click.echo(f"  {url}")


@click.command()
@config_option
@click.option("--unlist", is_flag=True, help="同时从 ddev list 注销")
def stop(config: str, unlist: bool) -> None:
    """停止 DDEV 项目"""
    ctrl = _container(config).controller
    r = ctrl.stop_and_unlist() if unlist else ctrl.stop()
    if not r.success:
        click.echo(f"停止失败: {r.brief()}", err=True)
        sys.exit(1)
    click.echo("已停止")
