"""
应用配置
从环境变量（以及 .env 文件）读取，进程启动时加载一次，之后只读
"""
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# 包目录 (sqlreports/)
PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_TEMPLATE_DIR = PACKAGE_DIR / "templates"


class Settings(BaseModel):
    """应用配置"""
    model_config = ConfigDict(frozen=True)

    report_dir: Path = Path("./reports")
    template_dir: Path = DEFAULT_TEMPLATE_DIR
    config_db_path: Path = Path("./data/config.db")
    encryption_key: Optional[str] = None
    log_level: str = "INFO"
    log_file: str = "./logs/app.log"

    @property
    def config_db_url(self) -> str:
        return f"sqlite:///{self.config_db_path}"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """
        从环境变量构建配置
        
        Args:
            load_env_file: 是否先加载 .env 文件
            
        Returns:
            Settings 实例
        """
        if load_env_file:
            load_dotenv()
        
        return cls(
            report_dir=Path(os.getenv("REPORT_DIR", "./reports")),
            template_dir=Path(os.getenv("TEMPLATE_DIR", str(DEFAULT_TEMPLATE_DIR))),
            config_db_path=Path(os.getenv("CONFIG_DB_PATH", "./data/config.db")),
            encryption_key=os.getenv("ENCRYPTION_KEY") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "./logs/app.log"),
        )


# 全局配置实例
_settings = None


def get_settings() -> Settings:
    """获取全局配置实例"""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
