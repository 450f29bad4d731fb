"""
日志配置
报表各模块共用的日志记录器，以及带上下文的错误日志
"""
import logging
import os
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_LOGGER_NAME = "sqlreports"
DEFAULT_LOG_FILE = "./logs/app.log"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class DetailedFormatter(logging.Formatter):
    """在日志末尾附加 extra_context（报表、SQL、数据库等）"""

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        context = getattr(record, "extra_context", None)
        if context:
            formatted += f"\n上下文信息: {context}"
        return formatted


def _level(log_level: str) -> int:
    return getattr(logging, log_level.upper(), logging.INFO)


def _file_handler(log_file: str) -> logging.Handler:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    # 文件中保留所有级别的日志
    handler.setLevel(logging.DEBUG)
    return handler


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    配置日志记录器

    Args:
        name: 日志记录器名称
        log_level: 日志级别，默认读取 LOG_LEVEL
        log_file: 日志文件路径，默认读取 LOG_FILE；空字符串表示不写文件
        console_output: 是否输出到标准错误

    Returns:
        配置好的日志记录器
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")
    if log_file is None:
        log_file = os.getenv("LOG_FILE", DEFAULT_LOG_FILE)

    logger = logging.getLogger(name)
    logger.setLevel(_level(log_level))
    # 每个模块的记录器都有自己的处理器
    logger.propagate = False
    logger.handlers.clear()

    handlers = []
    if log_file:
        handlers.append(_file_handler(log_file))
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(_level(log_level))
        handlers.append(console_handler)

    formatter = DetailedFormatter(LOG_FORMAT, DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """获取日志记录器，首次获取时按环境变量配置"""
    logger = logging.getLogger(name)
    if not logger.handlers:
        setup_logger(name)
    return logger


def log_error_with_context(
    logger: logging.Logger,
    message: str,
    error: Exception,
    context: Optional[Dict[str, Any]] = None
):
    """
    记录错误及其上下文和堆栈

    Args:
        logger: 日志记录器
        message: 错误消息
        error: 异常对象
        context: 上下文信息（SQL语句、数据库名等）
    """
    details = {
        "message": message,
        "error_type": type(error).__name__,
        "error_message": str(error),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "context": context or {},
        "traceback": "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        ),
    }
    logger.error(f"{message}\n详细信息: {details}", extra={"extra_context": context})


def log_sql_error(logger: logging.Logger, sql: str, database: str, error: Exception):
    """记录SQL执行错误"""
    log_error_with_context(logger, "SQL执行失败", error, {"sql": sql, "database": database})


def log_database_connection_error(
    logger: logging.Logger,
    db_config: Dict[str, Any],
    error: Exception
):
    """
    记录数据库连接错误，配置中的密码以 *** 代替

    Args:
        logger: 日志记录器
        db_config: 连接配置
        error: 异常对象
    """
    safe_config = {
        key: ("***" if key in ("password", "encrypted_password") and value else value)
        for key, value in db_config.items()
    }
    log_error_with_context(logger, "数据库连接失败", error, {"db_config": safe_config})
