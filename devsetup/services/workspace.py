"""工作空间管理 - 保证全新、空的项目目录

职责：
- 停止并注销同名的已有 DDEV 项目（失败仅告警）
- 删除并重建项目目录
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from devsetup.core.exceptions import WorkspaceError

if TYPE_CHECKING:
    from devsetup.core.protocols import EnvironmentController

logger = logging.getLogger(__name__)


class WorkspaceManager:
    """工作空间管理器"""

    def __init__(self, controller: EnvironmentController) -> None:
        self._controller = controller

    def reset(self, project_name: str, base_dir: str | Path) -> Path:
        """重置 base_dir/project_name 为空目录并返回路径"""
        if self._controller.exists(project_name):
            r = self._controller.stop_and_unlist(project_name)
            if not r.success:
                # 目录删除后旧环境状态已不可达，这里不必中止
                logger.warning("停止已有项目失败: %s", r.brief())

        project_dir = Path(base_dir) / project_name
        try:
            if project_dir.exists():
                shutil.rmtree(project_dir)
            project_dir.mkdir(parents=True)
        except OSError as e:
            raise WorkspaceError(f"无法准备项目目录 {project_dir}: {e}") from e

        logger.info("项目目录已清空: %s", project_dir)
        return project_dir
