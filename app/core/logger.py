"""
本文件用于初始化并提供项目统一日志能力（根 logger 配置与命名 logger 获取）。
主要函数:
- `configure_logging`: 初始化根日志格式与等级
- `setup_logger`: 获取具备统一格式的命名 logger
"""

import logging
import sys

from app.core.config import get_settings

settings = get_settings()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    """
    输入:
    - `level`: 日志等级字符串（如 INFO/DEBUG）

    输出:
    - `logging` 对应的等级整数

    作用:
    - 将字符串日志等级转换为 `logging` 可用的等级值，无法识别时回退到 INFO
    """

    return getattr(logging, (level or "").upper(), logging.INFO)


def configure_logging() -> None:
    """
    输入:
    - 无

    输出:
    - 无

    作用:
    - 初始化根 logger 的输出格式与等级，并同步常见库的日志等级
    """

    log_level = _resolve_level(settings.LOG_LEVEL)
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    root.setLevel(log_level)

    noisy_level = log_level
    if log_level == logging.INFO:
        noisy_level = logging.WARNING

    for name in (
        "uvicorn",
        "uvicorn.error",
        "uvicorn.access",
        "asyncio",
        "httpx",
        "openai",
        "aiosqlite",
    ):
        logging.getLogger(name).setLevel(noisy_level)


def setup_logger(name: str) -> logging.Logger:
    """
    输入:
    - `name`: logger 名称

    输出:
    - `logging.Logger` 实例

    作用:
    - 创建并返回指定名称的 logger（若已存在 handler 则复用）
    """

    logger = logging.getLogger(name)
    if logger.hasHandlers():
        return logger

    configure_logging()
    logger.setLevel(_resolve_level(settings.LOG_LEVEL))

    return logger


logger = setup_logger(settings.APP_NAME)
