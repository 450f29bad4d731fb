"""
SQLite数据库适配器
"""
from typing import Dict, Any
from .base import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """SQLite数据库适配器，连接配置的 url 为数据库文件路径"""

    def get_connection_string(self, config: Dict[str, Any]) -> str:
        url = config.get('url') or ''
        # 已是 sqlite:/// 地址时原样使用
        if url.startswith('sqlite:'):
            return url
        return f"{self.get_driver_name()}:///{url}"

    def get_driver_name(self) -> str:
        return "sqlite"

    def get_connect_args(self) -> Dict[str, Any]:
        # 连接可能在请求线程池的其他线程中关闭
        return {"check_same_thread": False}

    def get_sql_dialect(self) -> str:
        return "sqlite"

    def get_db_type(self) -> str:
        return "sqlite"
