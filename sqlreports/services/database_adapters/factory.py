"""
数据库适配器注册表
连接配置中的 type 字段（sqlite、mysql ...）对应一个适配器类
"""
from typing import Dict, List, Type

from ..dto import BackendType
from .base import DatabaseAdapter
from .mongodb import MongoDBAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter


class DatabaseAdapterFactory:
    """数据库适配器工厂类"""

    # 数据库类型 -> 适配器类，保持注册顺序
    _adapters: Dict[str, Type[DatabaseAdapter]] = {
        "sqlite": SQLiteAdapter,
        "mysql": MySQLAdapter,
        "postgresql": PostgreSQLAdapter,
        "mongodb": MongoDBAdapter,
    }

    @classmethod
    def get_adapter_class(cls, db_type: str) -> Type[DatabaseAdapter]:
        """
        查找数据库类型对应的适配器类（不区分大小写）

        Raises:
            ValueError: 如果数据库类型未注册
        """
        adapter_class = cls._adapters.get(db_type.lower())
        if adapter_class is None:
            raise ValueError(
                f"不支持的数据库类型: {db_type}。"
                f"支持的类型: {', '.join(cls._adapters)}"
            )
        return adapter_class

    @classmethod
    def get_adapter(cls, db_type: str) -> DatabaseAdapter:
        """根据数据库类型创建适配器实例"""
        return cls.get_adapter_class(db_type)()

    @classmethod
    def register_adapter(cls, db_type: str, adapter_class: Type[DatabaseAdapter]):
        cls._adapters[db_type.lower()] = adapter_class

    @classmethod
    def unregister_adapter(cls, db_type: str):
        cls._adapters.pop(db_type.lower(), None)

    @classmethod
    def get_supported_types(cls) -> List[str]:
        return list(cls._adapters)

    @classmethod
    def is_supported(cls, db_type: str) -> bool:
        return db_type.lower() in cls._adapters

    @classmethod
    def get_types_for_backend(cls, backend: BackendType) -> List[str]:
        """
        获取属于某个后端类型的所有数据库类型

        Args:
            backend: relational 或 document

        Returns:
            数据库类型列表
        """
        return [
            db_type for db_type, adapter_class in cls._adapters.items()
            if adapter_class.backend == backend
        ]
