"""
MongoDB适配器
文档型后端，目前只用于连接配置，查询执行尚未实现
"""
from typing import Dict, Any

from ..dto import BackendType
from .base import DatabaseAdapter


class MongoDBAdapter(DatabaseAdapter):
    """MongoDB适配器"""

    backend = BackendType.DOCUMENT
    
    def get_connection_string(self, config: Dict[str, Any]) -> str:
        return self.build_network_url(config)
    
    def get_driver_name(self) -> str:
        return "mongodb"
    
    def get_db_type(self) -> str:
        return "mongodb"
