"""
数据库模型包
"""
from .base import Base
from .database_config import ConnectionConfig

__all__ = [
    "Base",
    "ConnectionConfig",
]
