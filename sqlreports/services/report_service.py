"""
报表服务
整合头部解析、查询执行、结果整形和模板渲染，实现完整的报表渲染流程
"""
from typing import Any, Dict, List, Optional

from markupsafe import Markup

from .connection_registry import ConnectionRegistry
from .dto import ConnectionDescriptor, ReportDefinition, ReportOptions, VariableField
from .header_handlers import ParseContext
from .header_parser import HeaderParser
from .macro_expander import MacroExpander, get_macro_expander
from .query_executor import QueryExecutor
from .report_repository import ReportRepository
from .row_shaper import RowShaper
from .template_renderer import TemplateRenderer
from ..config import Settings, get_settings
from ..utils.logger import get_logger

logger = get_logger(__name__)


class PreparedReport:
    """已解析头部、已确定数据库连接的报表"""

    def __init__(
        self,
        definition: ReportDefinition,
        context: ParseContext,
        connection: ConnectionDescriptor
    ):
        self.definition = definition
        self.context = context
        self.connection = connection

    @property
    def options(self) -> ReportOptions:
        return self.context.options

    @property
    def macros(self) -> Dict[str, Any]:
        return self.context.macros

    @property
    def is_ready(self) -> bool:
        return self.context.is_ready


class ReportService:
    """报表服务类"""

    def __init__(
        self,
        repository: ReportRepository,
        renderer: TemplateRenderer,
        connections: ConnectionRegistry,
        header_parser: Optional[HeaderParser] = None,
        query_executor: Optional[QueryExecutor] = None,
        row_shaper: Optional[RowShaper] = None,
        macro_expander: Optional[MacroExpander] = None
    ):
        """
        初始化报表服务

        Args:
            repository: 报表定义仓库
            renderer: 模板渲染器
            connections: 已配置的数据库连接
            header_parser: 头部解析器
            query_executor: 查询执行器
            row_shaper: 结果行整形器
            macro_expander: 宏展开器
        """
        self.repository = repository
        self.renderer = renderer
        self.connections = connections
        self.macro_expander = macro_expander or get_macro_expander()
        self.header_parser = header_parser or HeaderParser()
        self.query_executor = query_executor or QueryExecutor(self.macro_expander)
        self.row_shaper = row_shaper or RowShaper()

    def prepare(
        self,
        identifier: str,
        macros: Optional[Dict[str, Any]] = None,
        database: Optional[str] = None
    ) -> PreparedReport:
        """
        加载报表并解析头部，确定使用的数据库连接

        Args:
            identifier: 报表标识
            macros: 宏变量
            database: 调用方指定的数据库连接（优先于 Database 指令）

        Returns:
            PreparedReport
        """
        definition = self.repository.load(identifier)
        context = self.header_parser.parse(definition, macros)

        if database:
            context.options.database = database

        connection = self.query_executor.resolve_connection(context.options, self.connections)
        return PreparedReport(definition, context, connection)

    def run(self, prepared: PreparedReport) -> ReportOptions:
        """
        执行查询并整形结果

        Args:
            prepared: 已准备的报表

        Returns:
            填充了结果和展示数据的报表选项
        """
        logger.info(
            f"开始执行报表: report={prepared.definition.identifier}, "
            f"database={prepared.connection.name}"
        )
        options = self.query_executor.run(
            prepared.options,
            prepared.definition.raw_body,
            prepared.macros,
            prepared.is_ready,
            prepared.connection
        )
        return self.row_shaper.shape(options)

    def _template_context(self, prepared: PreparedReport) -> Dict[str, Any]:
        description = prepared.options.description
        if description:
            # 描述中的宏按HTML转义后展开
            description = Markup(
                self.macro_expander.expand(description, prepared.macros, escape_html=True)
            )
        chart_rows = prepared.options.chart_rows
        chart_data = {
            "columns": [cell.key for cell in chart_rows[0].values] if chart_rows else [],
            "rows": [[cell.value for cell in row.values] for row in chart_rows],
        }
        return {
            "report": prepared.definition.identifier,
            "options": prepared.options,
            "description_html": description,
            "chart_data": chart_data,
            "macros": prepared.macros,
        }

    def render_report(
        self,
        identifier: str,
        macros: Optional[Dict[str, Any]] = None,
        database: Optional[str] = None
    ) -> str:
        """
        渲染报表

        Args:
            identifier: 报表标识
            macros: 宏变量
            database: 数据库连接名称

        Returns:
            渲染后的HTML
        """
        prepared = self.prepare(identifier, macros, database)
        return self._render_prepared_report(prepared)

    def _render_prepared_report(self, prepared: PreparedReport) -> str:
        options = self.run(prepared)
        return self.renderer.render(options.template, self._template_context(prepared))

    def build_variable_fields(self, prepared: PreparedReport) -> List[VariableField]:
        """
        构建变量输入表单的字段

        未设置名称时由变量键生成（start_date -> Start Date），类型默认为 string，
        select 类型的选项统一为 {display, value, selected}
        """
        fields = []
        for key, spec in prepared.options.variables.items():
            value = prepared.macros.get(key)
            field_type = spec.type or "string"
            name = spec.name or key.replace("_", " ").replace("-", " ").title()

            options = []
            choices = spec.options or []
            if isinstance(choices, dict):
                choices = list(choices.values())
            if field_type == "select":
                for option in choices:
                    if isinstance(option, dict):
                        option = dict(option)
                        option.setdefault("value", option.get("display"))
                        option.setdefault("display", option.get("value"))
                    else:
                        option = {"display": option, "value": option}
                    option["selected"] = value is not None and str(option["value"]) == str(value)
                    options.append(option)

            fields.append(VariableField(
                key=key,
                name=name,
                type=field_type,
                value=value,
                is_select=(field_type == "select"),
                options=options,
            ))
        return fields

    def render_variable_form(self, prepared: PreparedReport, template: str = "variable_form") -> str:
        """
        渲染变量输入表单，报表没有变量时返回空字符串

        Args:
            prepared: 已准备的报表
            template: 表单模板名称

        Returns:
            渲染后的HTML
        """
        if not prepared.options.variables:
            return ""

        context = self._template_context(prepared)
        context.update({
            "vars": self.build_variable_fields(prepared),
            "database": prepared.options.database,
            "databases": prepared.options.databases,
        })
        return self.renderer.render(template, context)

    def render_page(
        self,
        identifier: str,
        macros: Optional[Dict[str, Any]] = None,
        database: Optional[str] = None
    ) -> str:
        """
        渲染报表页面：变量输入表单 + 报表（报表就绪时）

        Args:
            identifier: 报表标识
            macros: 宏变量
            database: 数据库连接名称

        Returns:
            渲染后的HTML
        """
        prepared = self.prepare(identifier, macros, database)
        page = self.render_variable_form(prepared)

        if not prepared.is_ready:
            logger.info(f"报表未就绪，只显示变量表单: report={identifier}")
            return page

        return page + self._render_prepared_report(prepared)


def create_report_service(
    settings: Settings,
    connections: ConnectionRegistry
) -> ReportService:
    """根据配置创建报表服务"""
    return ReportService(
        repository=ReportRepository(settings.report_dir),
        renderer=TemplateRenderer(settings.template_dir),
        connections=connections,
    )


# 全局报表服务实例
_report_service = None


def get_report_service() -> ReportService:
    """
    获取全局报表服务实例

    首次调用时从配置数据库加载数据库连接
    """
    global _report_service
    if _report_service is None:
        from ..database import init_database
        from .encryption_service import get_encryption_service

        database = init_database()
        connections = ConnectionRegistry.from_database(database, get_encryption_service())
        _report_service = create_report_service(get_settings(), connections)
    return _report_service


def set_report_service(service: Optional[ReportService]):
    """替换全局报表服务实例（用于测试）"""
    global _report_service
    _report_service = service
