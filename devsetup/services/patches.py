"""补丁应用 - 尽力而为

把 unified diff 暂存到受管环境的临时目录，再在目标目录执行 patch -p0。
补丁格式对编排器不透明；任何失败都是 PatchError（Recoverable）。
"""

from __future__ import annotations

import logging
import posixpath
import shlex
from pathlib import Path
from typing import TYPE_CHECKING

from devsetup.core.exceptions import ExecutionError, PatchError
from devsetup.core.models import PatchJob

if TYPE_CHECKING:
    from devsetup.core.protocols import EnvironmentController

logger = logging.getLogger(__name__)

STAGING_DIR = "/tmp/patches"


class PatchApplier:
    """补丁应用器"""

    def __init__(
        self, controller: EnvironmentController, staging_dir: str = STAGING_DIR,
    ) -> None:
        self._controller = controller
        self._staging_dir = staging_dir

    def apply(self, payload: str | Path, target_dir: str) -> PatchJob:
        """暂存并应用补丁，调用方负责保证 payload 存在"""
        job = PatchJob(source=Path(payload), target_dir=target_dir)
        job.staged_path = posixpath.join(self._staging_dir, job.name)
        logger.info("应用补丁: %s", job.source)

        try:
            content = job.source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PatchError(f"无法读取补丁 {job.source}: {e}") from e

        staged = shlex.quote(job.staged_path)
        try:
            self._controller.exec(f"rm -f {staged}")
            self._controller.write_file(job.staged_path, content)
            self._controller.exec(
                f"cd {shlex.quote(target_dir)} && patch -p0 --forward < {staged}",
            )
        except ExecutionError as e:
            raise PatchError(f"补丁应用失败 {job.name}: {e}") from e

        logger.info("补丁已应用: %s -> %s", job.name, target_dir)
        return job
