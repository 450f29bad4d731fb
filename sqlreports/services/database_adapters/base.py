"""
数据库适配器基类
定义所有数据库适配器必须实现的接口
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from urllib.parse import quote_plus

from ..dto import BackendType


class DatabaseAdapter(ABC):
    """数据库适配器基类"""

    # 适配器所属的后端类型
    backend: BackendType = BackendType.RELATIONAL
    
    @abstractmethod
    def get_connection_string(self, config: Dict[str, Any]) -> str:
        """
        构建数据库连接字符串
        
        Args:
            config: 连接配置字典，包含 url, username, password
            
        Returns:
            数据库连接字符串
        """
        pass
    
    @abstractmethod
    def get_driver_name(self) -> str:
        """
        获取连接字符串的协议部分
        
        Returns:
            驱动名称，如 'mysql+pymysql', 'postgresql+psycopg2'
        """
        pass
    
    def get_connect_args(self) -> Dict[str, Any]:
        """
        获取传给数据库驱动的连接参数
        
        Returns:
            连接参数字典
        """
        return {}

    def get_sql_dialect(self) -> Optional[str]:
        """
        获取用于格式化SQL的方言名称（sqlglot）
        
        Returns:
            方言名称，None 表示使用通用方言
        """
        return None
    
    def get_db_type(self) -> str:
        """
        获取数据库类型名称
        
        Returns:
            数据库类型，如 'mysql', 'postgresql', 'sqlite'
        """
        return self.__class__.__name__.replace('Adapter', '').lower()

    def build_network_url(self, config: Dict[str, Any]) -> str:
        """
        构建 driver://[user[:password]@]host/db 形式的连接字符串
        
        用户名和密码会进行URL编码，url 已带协议时原样返回
        """
        url = config.get('url') or ''
        if '://' in url:
            return url

        username = config.get('username') or ''
        password = config.get('password') or ''
        credentials = ''
        if username:
            credentials = quote_plus(username)
            if password:
                credentials += ':' + quote_plus(password)
            credentials += '@'
        return f"{self.get_driver_name()}://{credentials}{url}"
