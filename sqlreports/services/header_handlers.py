"""
报表头部指令处理器
每个指令（Name、Type、Variables ...）由一个独立注册的处理器解释，
新的指令通过 HeaderHandlerRegistry.register_handler 注册，无需修改解析器
"""
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

from pydantic import ValidationError

from .dto import BackendType, ChartOptions, FilterSpec, ReportOptions, VariableSpec
from .exceptions import InvalidDirectiveValue, UnknownDirective, UnknownReportType
from .report_utils import coerce_column_ref, coerce_column_refs
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ParseContext:
    """头部解析过程中传递给各处理器的状态"""

    def __init__(self, identifier: str, macros: Optional[Dict[str, Any]] = None):
        """
        Args:
            identifier: 报表标识（相对于报表目录的路径）
            macros: 调用方提供的宏变量
        """
        self.identifier = identifier
        self.macros = macros or {}
        self.options = ReportOptions(name=identifier)
        # 默认就绪，头部中引用了未提供的变量时置为 False
        self.is_ready = True
        self.missing_variables = []

    def require_variable(self, key: str):
        """声明报表需要变量 key，未提供时报表不就绪"""
        if key not in self.macros:
            self.is_ready = False
            if key not in self.missing_variables:
                self.missing_variables.append(key)


class HeaderHandler(ABC):
    """头部指令处理器基类"""

    @abstractmethod
    def parse(self, name: str, value: str, context: ParseContext) -> None:
        """
        解释指令并修改报表选项

        Args:
            name: 指令名称
            value: 指令的原始值
            context: 解析上下文（包含报表选项和就绪状态）
        """
        pass

    @staticmethod
    def load_json(name: str, value: str) -> Any:
        """解析 JSON 格式的指令值"""
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise InvalidDirectiveValue(name, value, f"JSON格式错误: {e.msg}")

    @staticmethod
    def looks_like_json(value: str) -> bool:
        return value[:1] in ("{", "[")


class NameHeader(HeaderHandler):
    """报表名称"""

    def parse(self, name: str, value: str, context: ParseContext) -> None:
        context.options.name = value


class DescriptionHeader(HeaderHandler):
    """报表描述，多行时逐行追加"""

    def parse(self, name: str, value: str, context: ParseContext) -> None:
        if context.options.description:
            context.options.description += "\n" + value
        else:
            context.options.description = value


class TypeHeader(HeaderHandler):
    """报表类型"""

    TYPE_ALIASES: Dict[str, BackendType] = {
        "relational": BackendType.RELATIONAL,
        "sql": BackendType.RELATIONAL,
        "mysql": BackendType.RELATIONAL,
        "sqlite": BackendType.RELATIONAL,
        "postgresql": BackendType.RELATIONAL,
        "document": BackendType.DOCUMENT,
        "mongo": BackendType.DOCUMENT,
        "mongodb": BackendType.DOCUMENT,
        "js": BackendType.DOCUMENT,
    }

    def parse(self, name: str, value: str, context: ParseContext) -> None:
        backend = self.TYPE_ALIASES.get(value.strip().lower())
        if backend is None:
            raise UnknownReportType(report_type=value, identifier=context.identifier)
        context.options.type = backend


class DatabaseHeader(HeaderHandler):
    """默认数据库连接"""

    def parse(self, name: str, value: str, context: ParseContext) -> None:
        context.options.database = value or None


class VariablesHeader(HeaderHandler):
    """
    报表需要的输入变量

    支持两种格式：
    - JSON: {"start": {"name": "Start Date", "type": "date"}}
    - 简写: start, Start Date[, type]
    """

    def parse(self, name: str, value: str, context: ParseContext) -> None:
        if self.looks_like_json(value):
            variables = self.load_json(name, value)
            if not isinstance(variables, dict):
                raise InvalidDirectiveValue(name, value, "必须是JSON对象")
        else:
            parts = [part.strip() for part in value.split(",")]
            if not parts[0]:
                raise InvalidDirectiveValue(name, value, "缺少变量名")
            params = {}
            if len(parts) > 1 and parts[1]:
                params["name"] = parts[1]
            if len(parts) > 2 and parts[2]:
                params["type"] = parts[2]
            variables = {parts[0]: params}

        for key, params in variables.items():
            if params is None:
                params = {}
            elif isinstance(params, str):
                params = {"name": params}
            elif not isinstance(params, dict):
                raise InvalidDirectiveValue(name, value, f"变量 {key} 的定义无效")
            try:
                context.options.variables[key] = VariableSpec(**params)
            except ValidationError as e:
                raise InvalidDirectiveValue(name, value, f"变量 {key} 的定义无效: {e.errors()[0]['msg']}")
            context.require_variable(key)


class FiltersHeader(HeaderHandler):
    """
    列过滤器

    支持两种格式：
    - JSON: {"amount": "number", "2": {"filter": "link"}}
    - 简写: amount, number
    """

    def parse(self, name: str, value: str, context: ParseContext) -> None:
        if self.looks_like_json(value):
            filters = self.load_json(name, value)
            if not isinstance(filters, dict):
                raise InvalidDirectiveValue(name, value, "必须是JSON对象")
        else:
            column, _, filter_name = value.partition(",")
            if not column.strip() or not filter_name.strip():
                raise InvalidDirectiveValue(name, value, "格式应为: 列, 过滤器")
            filters = {column.strip(): filter_name.strip()}

        for column, spec in filters.items():
            if isinstance(spec, dict):
                filter_name = spec.get("filter")
            else:
                filter_name = spec
            if not filter_name or not isinstance(filter_name, str):
                raise InvalidDirectiveValue(name, value, f"列 {column} 缺少过滤器名称")
            context.options.filters[coerce_column_ref(column)] = FilterSpec(filter=filter_name)


class ColumnsHeader(HeaderHandler):
    """列样式（raw、pre 等），按列顺序给出，空项表示默认样式"""

    def parse(self, name: str, value: str, context: ParseContext) -> None:
        if self.looks_like_json(value):
            columns = self.load_json(name, value)
            if not isinstance(columns, list):
                raise InvalidDirectiveValue(name, value, "必须是JSON数组")
        else:
            columns = value.split(",")

        context.options.columns = [
            str(column).strip() or None if column is not None else None
            for column in columns
        ]


class ChartHeader(HeaderHandler):
    """图表配置: {"x": [...], "y": [...], "omit-total": true}"""

    @staticmethod
    def _parse_flag(name: str, value: str, flag: Any) -> bool:
        """omit-total 只接受 JSON 布尔值，或字符串 true / false"""
        if isinstance(flag, bool):
            return flag
        if isinstance(flag, str) and flag.strip().lower() in ("true", "false"):
            return flag.strip().lower() == "true"
        raise InvalidDirectiveValue(name, value, f"omit-total 必须是 true 或 false: {flag!r}")

    def parse(self, name: str, value: str, context: ParseContext) -> None:
        if not value:
            context.options.chart = ChartOptions()
            return

        config = self.load_json(name, value)
        if not isinstance(config, dict):
            raise InvalidDirectiveValue(name, value, "必须是JSON对象")

        chart = ChartOptions()
        if config.get("x") is not None:
            chart.x = coerce_column_refs(config["x"])
        if config.get("y") is not None:
            chart.y = coerce_column_refs(config["y"])
        flag = config.get("omit-total", config.get("omit_total", False))
        chart.omit_total = self._parse_flag(name, value, flag)
        context.options.chart = chart


class TemplateHeader(HeaderHandler):
    """输出模板名称"""

    def parse(self, name: str, value: str, context: ParseContext) -> None:
        if not value:
            raise InvalidDirectiveValue(name, value, "模板名称不能为空")
        context.options.template = value


class HeaderHandlerRegistry:
    """头部指令处理器注册表"""

    # 注册的处理器映射
    _handlers: Dict[str, Type[HeaderHandler]] = {
        "Name": NameHeader,
        "Description": DescriptionHeader,
        "Type": TypeHeader,
        "Database": DatabaseHeader,
        "Variables": VariablesHeader,
        "Filters": FiltersHeader,
        "Columns": ColumnsHeader,
        "Chart": ChartHeader,
        "Template": TemplateHeader,
    }

    @classmethod
    def get_handler(cls, name: str) -> HeaderHandler:
        """
        根据指令名称获取处理器实例

        Args:
            name: 指令名称

        Returns:
            处理器实例

        Raises:
            UnknownDirective: 如果指令未注册
        """
        handler_class = cls._handlers.get(name)
        if not handler_class:
            raise UnknownDirective(name)
        return handler_class()

    @classmethod
    def register_handler(cls, name: str, handler_class: Type[HeaderHandler]):
        """
        注册新的指令处理器

        Args:
            name: 指令名称
            handler_class: 处理器类
        """
        cls._handlers[name] = handler_class
        logger.debug(f"注册头部指令处理器: {name} -> {handler_class.__name__}")

    @classmethod
    def unregister_handler(cls, name: str):
        """移除指令处理器"""
        cls._handlers.pop(name, None)

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._handlers

    @classmethod
    def get_directive_names(cls) -> list:
        return list(cls._handlers.keys())
