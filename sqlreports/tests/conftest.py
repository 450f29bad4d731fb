"""
测试公共配置和夹具
"""
import os

# 测试时不写日志文件，配置数据库不落到工作目录
os.environ["LOG_FILE"] = ""
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from sqlalchemy import create_engine

from sqlreports.database import Database, init_database
from sqlreports.services.connection_registry import ConnectionRegistry
from sqlreports.services.dto import ConnectionDescriptor
from sqlreports.services.encryption_service import EncryptionService
from sqlreports.services.report_repository import ReportRepository
from sqlreports.services.report_service import ReportService
from sqlreports.services.template_renderer import TemplateRenderer
from sqlreports.config import DEFAULT_TEMPLATE_DIR


SALES_SCHEMA = [
    "CREATE TABLE sales (region TEXT, orders INTEGER, amount REAL)",
    "INSERT INTO sales VALUES ('north', 1200, 1234.5)",
    "INSERT INTO sales VALUES ('south', 300, 99.0)",
    "INSERT INTO sales VALUES ('TOTAL', 1500, 1333.5)",
]


def write_report(report_dir, identifier: str, content: str):
    """在报表目录中写入报表文件"""
    path = report_dir / identifier
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def sales_db_path(tmp_path):
    """包含 sales 表的 SQLite 数据库文件"""
    db_path = tmp_path / "sales.db"
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        for stmt in SALES_SCHEMA:
            conn.exec_driver_sql(stmt)
    engine.dispose()
    return db_path


@pytest.fixture
def registry(sales_db_path, tmp_path):
    """两个 SQLite 连接和一个 MongoDB 连接"""
    empty_db = tmp_path / "empty.db"
    return ConnectionRegistry([
        ConnectionDescriptor(name="main", type="sqlite", url=str(sales_db_path)),
        ConnectionDescriptor(name="backup", type="sqlite", url=str(empty_db)),
        ConnectionDescriptor(name="docs", type="mongodb", url="localhost:27017/docs"),
    ])


@pytest.fixture
def report_dir(tmp_path):
    path = tmp_path / "reports"
    path.mkdir()
    return path


@pytest.fixture
def report_service(report_dir, registry):
    return ReportService(
        repository=ReportRepository(report_dir),
        renderer=TemplateRenderer(DEFAULT_TEMPLATE_DIR),
        connections=registry,
    )


@pytest.fixture
def config_database(tmp_path):
    """临时配置数据库"""
    database = Database(f"sqlite:///{tmp_path / 'config.db'}")
    init_database(database)
    yield database
    database.engine.dispose()


@pytest.fixture
def encryption_service():
    return EncryptionService(key=EncryptionService.generate_key())


@pytest.fixture
def make_report(report_dir):
    """返回写入报表文件的函数"""
    def _make(identifier: str, content: str):
        return write_report(report_dir, identifier, content)
    return _make
