"""
数据库连接配置模型
"""
from sqlalchemy import Column, String, Text, Integer
from .base import Base, TimestampMixin


class ConnectionConfig(Base, TimestampMixin):
    """报表可用的数据库连接表"""
    __tablename__ = "report_connections"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    type = Column(String(50), nullable=False)  # sqlite, mysql, postgresql, mongodb
    url = Column(Text, nullable=False)
    username = Column(String(255), nullable=True)
    encrypted_password = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)  # 排在最前的连接是默认连接

    def __repr__(self):
        return f"<ConnectionConfig(id={self.id}, name={self.name}, type={self.type})>"
