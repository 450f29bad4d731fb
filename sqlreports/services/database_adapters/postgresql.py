"""
PostgreSQL数据库适配器
"""
from typing import Dict, Any
from .base import DatabaseAdapter


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL数据库适配器（psycopg2驱动）"""
    
    def get_connection_string(self, config: Dict[str, Any]) -> str:
        return self.build_network_url(config)
    
    def get_driver_name(self) -> str:
        return "postgresql+psycopg2"

    def get_sql_dialect(self) -> str:
        # sqlglot 中 PostgreSQL 方言的名称
        return "postgres"
    
    def get_db_type(self) -> str:
        return "postgresql"
