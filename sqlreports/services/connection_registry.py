"""
数据库连接注册表
进程启动时从配置数据库加载一次，之后只读
"""
import uuid
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func

from ..database import Database
from ..models.database_config import ConnectionConfig
from .database_adapters import DatabaseAdapterFactory
from .dto import BackendType, ConnectionDescriptor, DatabaseChoice
from .encryption_service import EncryptionService
from .exceptions import ConnectionFailed
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ConnectionRegistry:
    """已配置数据库连接的只读注册表（保持配置顺序）"""

    def __init__(self, connections: Iterable[ConnectionDescriptor] = ()):
        self._connections: Tuple[ConnectionDescriptor, ...] = tuple(connections)

    @classmethod
    def from_database(
        cls,
        database: Database,
        encryption_service: EncryptionService
    ) -> "ConnectionRegistry":
        """
        从配置数据库加载所有连接

        Args:
            database: 配置数据库
            encryption_service: 用于解密密码

        Returns:
            ConnectionRegistry 实例
        """
        with database.get_session() as session:
            configs = session.query(ConnectionConfig).order_by(
                ConnectionConfig.position,
                ConnectionConfig.created_at
            ).all()

            connections = [
                ConnectionDescriptor(
                    name=config.name,
                    type=config.type.lower(),
                    url=config.url,
                    username=config.username,
                    password=encryption_service.decrypt(config.encrypted_password) or None,
                )
                for config in configs
            ]

        logger.info(f"加载数据库连接配置: {[c.name for c in connections]}")
        return cls(connections)

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self):
        return iter(self._connections)

    def get(self, name: str) -> Optional[ConnectionDescriptor]:
        for connection in self._connections:
            if connection.name == name:
                return connection
        return None

    def for_backend(self, backend: BackendType) -> List[ConnectionDescriptor]:
        """获取指定后端类型的连接（保持配置顺序）"""
        db_types = DatabaseAdapterFactory.get_types_for_backend(backend)
        return [c for c in self._connections if c.type in db_types]

    def resolve(self, requested: Optional[str], backend: BackendType) -> ConnectionDescriptor:
        """
        确定报表使用的连接

        请求的连接未设置或不存在时，使用该后端类型的第一个连接

        Args:
            requested: 请求的连接名称
            backend: 报表的后端类型

        Returns:
            连接配置

        Raises:
            ConnectionFailed: 如果该后端类型没有任何可用连接
        """
        candidates = self.for_backend(backend)
        if not candidates:
            raise ConnectionFailed(requested, f"没有配置 {backend.value} 类型的数据库连接")

        for connection in candidates:
            if connection.name == requested:
                return connection

        if requested:
            logger.warning(f"数据库连接不存在: {requested}，使用默认连接 {candidates[0].name}")
        return candidates[0]

    def choices(self, selected: str, backend: BackendType) -> List[DatabaseChoice]:
        """用于切换数据库表单的选项列表"""
        return [
            DatabaseChoice(name=c.name, selected=(c.name == selected))
            for c in self.for_backend(backend)
        ]


def save_connection(
    database: Database,
    encryption_service: EncryptionService,
    name: str,
    db_type: str,
    url: str,
    username: Optional[str] = None,
    password: Optional[str] = None
) -> str:
    """
    在配置数据库中新增连接，排在已有连接之后

    Returns:
        新连接的ID

    Raises:
        ValueError: 如果数据库类型不支持或名称已存在
    """
    if not DatabaseAdapterFactory.is_supported(db_type):
        raise ValueError(
            f"不支持的数据库类型: {db_type}。"
            f"支持的类型: {', '.join(DatabaseAdapterFactory.get_supported_types())}"
        )

    with database.get_session() as session:
        if session.query(ConnectionConfig).filter_by(name=name).first():
            raise ValueError(f"数据库连接已存在: {name}")

        max_position = session.query(func.max(ConnectionConfig.position)).scalar()
        config = ConnectionConfig(
            id=str(uuid.uuid4()),
            name=name,
            type=db_type.lower(),
            url=url,
            username=username,
            encrypted_password=encryption_service.encrypt(password) or None,
            position=(max_position + 1) if max_position is not None else 0,
        )
        session.add(config)
        connection_id = config.id

    logger.info(f"保存数据库连接: {name} ({db_type})")
    return connection_id
