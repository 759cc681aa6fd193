"""收尾清理 - 删除容器内与宿主机上的临时暂存目录

任何删除失败只记日志，不影响整体结果。
"""

from __future__ import annotations

import logging
import shlex
import shutil
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from devsetup.core.exceptions import DevSetupError

if TYPE_CHECKING:
    from devsetup.core.protocols import EnvironmentController

logger = logging.getLogger(__name__)


class CleanupStage:
    """清理阶段"""

    def __init__(
        self, controller: EnvironmentController, remote_paths: Iterable[str] = (),
    ) -> None:
        self._controller = controller
        self._remote_paths = list(remote_paths)

    def cleanup(self, host_paths: Iterable[str | Path] = ()) -> None:
        """清理临时文件，永不抛出业务异常"""
        logger.info("清理临时文件...")
        if self._remote_paths:
            targets = " ".join(shlex.quote(p) for p in self._remote_paths)
            try:
                self._controller.exec(f"rm -rf {targets} || true")
            except (DevSetupError, OSError) as e:
                logger.warning("容器内临时目录清理失败: %s", e)

        for path in host_paths:
            p = Path(path)
            try:
                if p.is_dir():
                    shutil.rmtree(p)
                elif p.exists():
                    p.unlink()
            except OSError as e:
                logger.warning("宿主机临时文件清理失败: %s (%s)", p, e)

        logger.info("清理完成")
