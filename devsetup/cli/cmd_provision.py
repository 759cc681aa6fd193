"""CLI — 装配流水线命令"""

from __future__ import annotations

import sys

import click

from devsetup.cli import _container, config_option
from devsetup.core.exceptions import DevSetupError, StepFailedError
from devsetup.services.orchestrator import Orchestrator, RunReport


def register(group: click.Group) -> None:
    group.add_command(provision)
    group.add_command(steps)


def _print_report(report: RunReport) -> None:
    """打印运行报告摘要"""
    click.echo("\n=== 装配报告 ===")
    for name in report.succeeded:
        click.echo(f"  {click.style('✔', fg='green')} {name}")
    for name in report.failed:
        detail = report.details.get(name, "")
        mark = "✖" if name == report.aborted_step else "⚠"
        color = "red" if name == report.aborted_step else "yellow"
        click.echo(f"  {click.style(mark, fg=color)} {name}" + (f"  ({detail})" if detail else ""))
    for name in report.skipped:
        click.echo(f"  - {name}  (跳过)")
    recoverable = [n for n in report.failed if n != report.aborted_step]
    click.echo(
        f"\n成功: {len(report.succeeded)}  可恢复失败: {len(recoverable)}"
        f"  跳过: {len(report.skipped)}"
    )
    if report.aborted_step:
        click.echo(f"中止于: {report.aborted_step}")


@click.command()
@config_option
@click.option("--project-name", envvar="PROJECT_NAME", default="", help="项目名（环境变量 PROJECT_NAME）")
@click.option("--base-dir", envvar="BASE_DIR", default="", help="项目父目录（环境变量 BASE_DIR）")
def provision(config: str, project_name: str, base_dir: str) -> None:
    """按顺序执行全部装配步骤"""
    try:
        orch = Orchestrator(_container(config, project_name, base_dir))
        report = orch.provision()
    except StepFailedError as e:
        if e.report is not None:
            _print_report(e.report)
        click.echo(click.style(f"✖ {e}", fg="red"), err=True)
        sys.exit(1)
    except DevSetupError as e:
        click.echo(click.style(f"✖ [{e.code}] {e}", fg="red"), err=True)
        sys.exit(1)

    _print_report(report)
    click.echo(click.style("✔ 项目装配完成", fg="green"))


@click.command()
@config_option
def steps(config: str) -> None:
    """列出装配步骤（不执行）"""
    plan = Orchestrator(_container(config)).plan()
    for i, step in enumerate(plan, 1):
        click.echo(f"  {i:2d}. {step.name:32s} [{step.criticality.value:11s}] {step.description}")
