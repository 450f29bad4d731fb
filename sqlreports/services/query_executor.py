"""
查询执行器
展开宏、选择数据库连接并执行报表查询
"""
import time
from typing import Any, Dict, List, Optional

import sqlglot
from sqlglot.errors import SqlglotError
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from .connection_registry import ConnectionRegistry
from .database_adapters import DatabaseAdapter, DatabaseAdapterFactory
from .dto import BackendType, ConnectionDescriptor, ReportOptions
from .exceptions import ConnectionFailed, ExecutionFailed, NotReady, UnsupportedBackend
from .macro_expander import MacroExpander, get_macro_expander
from ..utils.logger import get_logger, log_sql_error, log_database_connection_error

logger = get_logger(__name__)


def _driver_error(error: Exception) -> str:
    """取出数据库驱动返回的原始错误信息"""
    if isinstance(error, DBAPIError) and error.orig is not None:
        return str(error.orig)
    return str(error)


class QueryExecutor:
    """查询执行器"""

    def __init__(self, macro_expander: Optional[MacroExpander] = None):
        """
        Args:
            macro_expander: 宏展开器，默认使用全局实例
        """
        self.macros = macro_expander or get_macro_expander()

    def resolve_connection(
        self,
        options: ReportOptions,
        registry: ConnectionRegistry
    ) -> ConnectionDescriptor:
        """
        确定报表使用的数据库连接，并填充 database 和 databases

        Args:
            options: 报表选项（type 必须已确定）
            registry: 已配置的连接

        Returns:
            连接配置

        Raises:
            UnsupportedBackend: 文档型报表且没有配置文档型连接
            ConnectionFailed: 该后端类型没有任何可用连接
        """
        if options.type == BackendType.DOCUMENT and not registry.for_backend(options.type):
            # 文档型后端尚未实现，没有配置连接时同样报告为不支持
            raise UnsupportedBackend(options.type.value)

        connection = registry.resolve(options.database, options.type)
        options.database = connection.name
        options.databases = registry.choices(connection.name, options.type)
        return connection

    def run(
        self,
        options: ReportOptions,
        body: str,
        macros: Dict[str, Any],
        is_ready: bool,
        connection: ConnectionDescriptor
    ) -> ReportOptions:
        """
        执行报表查询并填充结果字段（query、query_formatted、time、count、raw_rows）

        Args:
            options: 报表选项
            body: 查询模板
            macros: 宏变量
            is_ready: 报表是否就绪
            connection: 数据库连接配置

        Returns:
            填充了结果字段的报表选项

        Raises:
            NotReady: 报表缺少必需的变量
            UnsupportedBackend: 文档型后端
            ConnectionFailed: 无法连接数据库
            ExecutionFailed: 查询执行失败
        """
        if not is_ready:
            missing = [key for key in options.variables if key not in macros]
            raise NotReady(missing)

        adapter = DatabaseAdapterFactory.get_adapter(connection.type)

        sql = self.macros.expand(body, macros)
        options.query = sql
        options.query_formatted = self._format_query(sql, adapter)

        if options.type != BackendType.RELATIONAL or adapter.backend != BackendType.RELATIONAL:
            raise UnsupportedBackend(options.type.value if options.type else connection.type)

        statements = self._split_sql_statements(sql)
        if not statements:
            raise ExecutionFailed("查询为空")

        start = time.perf_counter()
        rows = self._execute_statements(connection, adapter, statements)

        options.time = round(time.perf_counter() - start, 5)
        options.count = len(rows)
        options.raw_rows = rows

        logger.info(
            f"报表查询成功: database={connection.name}, "
            f"statements={len(statements)}, rows={options.count}, time={options.time}s"
        )
        return options

    def _split_sql_statements(self, sql: str) -> List[str]:
        """
        将多个SQL语句分割成单独的语句

        Args:
            sql: 可能包含多个语句的SQL字符串

        Returns:
            SQL语句列表（已去除空语句）
        """
        statements = []
        for stmt in sql.split(';'):
            stmt = stmt.strip()
            if stmt:
                statements.append(stmt)
        return statements

    def _format_query(self, sql: str, adapter: DatabaseAdapter) -> str:
        """格式化SQL用于显示，无法解析时返回原文"""
        if adapter.backend != BackendType.RELATIONAL or not sql.strip():
            return sql
        try:
            formatted = sqlglot.transpile(
                sql,
                read=adapter.get_sql_dialect(),
                write=adapter.get_sql_dialect(),
                pretty=True
            )
        except SqlglotError as e:
            logger.warning(f"SQL格式化失败，使用原始SQL: {e}")
            return sql
        return ";\n\n".join(formatted)

    def _create_engine(self, connection: ConnectionDescriptor, adapter: DatabaseAdapter) -> Engine:
        connection_string = adapter.get_connection_string({
            'url': connection.url,
            'username': connection.username,
            'password': connection.password,
        })
        return create_engine(connection_string, connect_args=adapter.get_connect_args())

    def _execute_statements(
        self,
        connection: ConnectionDescriptor,
        adapter: DatabaseAdapter,
        statements: List[str]
    ) -> List[Dict[str, Any]]:
        """
        在同一个连接上依次执行所有语句，只保留最后一个语句的结果

        连接在执行前打开，无论成功或失败都会关闭
        """
        try:
            engine = self._create_engine(connection, adapter)
        except (SQLAlchemyError, ImportError) as e:
            log_database_connection_error(logger, connection.model_dump(), e)
            raise ConnectionFailed(connection.name, _driver_error(e))

        try:
            try:
                # 不传参数执行，SQL 中的 % 原样交给驱动
                db_conn = engine.connect().execution_options(
                    isolation_level="AUTOCOMMIT",
                    no_parameters=True
                )
            except SQLAlchemyError as e:
                log_database_connection_error(logger, connection.model_dump(), e)
                raise ConnectionFailed(connection.name, _driver_error(e))

            try:
                return self._run_on_connection(db_conn, connection.name, statements)
            finally:
                db_conn.close()
        finally:
            engine.dispose()

    def _run_on_connection(
        self,
        db_conn: Connection,
        database_name: str,
        statements: List[str]
    ) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        for i, stmt in enumerate(statements):
            logger.debug(f"执行语句 {i+1}/{len(statements)}: {stmt[:100]}")
            try:
                result = db_conn.exec_driver_sql(stmt)
                # 已执行的语句不会回滚，只保留最后一个语句的结果
                if result.returns_rows:
                    columns = list(result.keys())
                    rows = [dict(zip(columns, row)) for row in result.fetchall()]
                else:
                    rows = []
            except SQLAlchemyError as e:
                log_sql_error(logger, stmt, database_name, e)
                raise ExecutionFailed(_driver_error(e), statement=stmt)
        return rows
