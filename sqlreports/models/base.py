"""
SQLAlchemy基础配置
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """当前 UTC 时间（不带时区信息，SQLite 不保存时区）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """时间戳混入类"""
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
