"""
MySQL数据库适配器
"""
from typing import Dict, Any
from .base import DatabaseAdapter


class MySQLAdapter(DatabaseAdapter):
    """MySQL数据库适配器（PyMySQL驱动）"""
    
    def get_connection_string(self, config: Dict[str, Any]) -> str:
        return self.build_network_url(config)
    
    def get_driver_name(self) -> str:
        return "mysql+pymysql"

    def get_connect_args(self) -> Dict[str, Any]:
        """查询结果使用 utf8mb4 编码"""
        return {"charset": "utf8mb4"}

    def get_sql_dialect(self) -> str:
        return "mysql"
    
    def get_db_type(self) -> str:
        return "mysql"
