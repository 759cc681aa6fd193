"""devsetup 日志配置

提供统一的日志配置和格式化功能，支持带级别符号的终端输出和结构化 JSON 两种格式。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

import click

# 级别 → (符号, 颜色)
_LEVEL_STYLES: dict[int, tuple[str, str]] = {
    logging.DEBUG: ("·", "bright_black"),
    logging.INFO: ("ℹ", "cyan"),
    logging.WARNING: ("⚠", "yellow"),
    logging.ERROR: ("✖", "red"),
    logging.CRITICAL: ("✖", "red"),
}


class SymbolFormatter(logging.Formatter):
    """终端格式器：每行前缀级别符号，TTY 下着色

    输出格式:
        ℹ Creating DDEV project...
        ⚠ Web container is unhealthy.
    """

    def __init__(self, color: bool = False) -> None:
        super().__init__("%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        symbol, fg = _LEVEL_STYLES.get(record.levelno, ("?", "white"))
        if self.color:
            symbol = click.style(symbol, fg=fg, bold=True)
        return f"{symbol} {super().format(record)}"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器，便于 CI 流水线消费

    输出格式:
        {
            "timestamp": "2024-01-01T12:00:00+00:00",
            "level": "INFO",
            "logger": "module.name",
            "message": "log message",
            "module": "filename",
            "function": "func_name",
            "line": 42,
            "exception": "traceback..." (仅在有异常时)
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            # 使用 record.created，记录事件发生时间而非格式化时间
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        json_output: 为 True 时使用 JSON 格式（适用于 CI），否则使用符号格式

    说明:
        - 输出到 stderr
        - 自动清理已有 handlers，避免重复输出
        - stderr 为 TTY 时符号着色
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(SymbolFormatter(color=sys.stderr.isatty()))

    root.addHandler(handler)


def reset_logging() -> None:
    """清理根日志器上所有已注册的 handlers"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
