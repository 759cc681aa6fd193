"""宿主机依赖预检

在任何状态变更之前检查必需工具是否可执行，遇到第一个缺失的工具立即失败。
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable

from devsetup.core.exceptions import MissingDependencyError

logger = logging.getLogger(__name__)


class PreflightChecker:
    """宿主机工具预检器"""

    def __init__(self, which: Callable[[str], str | None] = shutil.which) -> None:
        self._which = which

    def verify(self, required_tools: Iterable[str]) -> None:
        """逐个检查工具，缺失时抛 MissingDependencyError（无副作用）"""
        for tool in required_tools:
            path = self._which(tool)
            if path is None:
                raise MissingDependencyError(tool)
            logger.debug("宿主机工具就绪: %s -> %s", tool, path)
        logger.info("宿主机依赖检查通过")
