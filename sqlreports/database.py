"""
配置数据库初始化和连接管理
配置数据库（SQLite）保存报表可用的数据库连接
"""
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session as SQLAlchemySession
from contextlib import contextmanager
from typing import Generator, Optional

from .config import get_settings
from .models.base import Base
from .models import ConnectionConfig  # noqa: F401  注册模型
from .utils.logger import get_logger

logger = get_logger(__name__)


class Database:
    """配置数据库管理类"""
    
    def __init__(self, db_url: Optional[str] = None):
        """
        初始化数据库连接
        
        Args:
            db_url: 数据库URL，如果为None则从配置读取
        """
        if db_url is None:
            settings = get_settings()
            # 确保data目录存在
            db_dir = os.path.dirname(str(settings.config_db_path))
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
            db_url = settings.config_db_url
        
        engine_config = {
            "pool_pre_ping": True,  # 使用前检查连接是否有效
            "echo": False,
        }
        
        # SQLite特殊配置
        if db_url.startswith("sqlite"):
            engine_config["connect_args"] = {"check_same_thread": False}
        
        self.engine = create_engine(db_url, **engine_config)
        
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
            expire_on_commit=False  # 提交后不过期对象，会话关闭后仍可读取
        )
    
    def create_tables(self):
        """创建所有表"""
        Base.metadata.create_all(bind=self.engine)
    
    def drop_tables(self):
        """删除所有表（谨慎使用）"""
        Base.metadata.drop_all(bind=self.engine)
    
    @contextmanager
    def get_session(self) -> Generator[SQLAlchemySession, None, None]:
        """
        获取数据库会话的上下文管理器
        
        Yields:
            SQLAlchemy会话对象
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


# 全局数据库实例
_db_instance = None


def get_database() -> Database:
    """获取全局数据库实例"""
    global _db_instance
    if _db_instance is None:
        _db_instance = Database()
    return _db_instance


def init_database(database: Optional[Database] = None) -> Database:
    """初始化配置数据库（创建所有表）"""
    db = database or get_database()
    db.create_tables()
    logger.info("配置数据库初始化完成")
    return db
