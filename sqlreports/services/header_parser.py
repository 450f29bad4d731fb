"""
报表头部解析器
将报表头部的注释指令解析为报表选项
"""
import os
from typing import Any, Dict, Optional, Tuple

from .dto import BackendType, ReportDefinition, ReportOptions
from .exceptions import UnknownReportType
from .header_handlers import HeaderHandlerRegistry, ParseContext
from ..utils.logger import get_logger

logger = get_logger(__name__)

# 头部行必须以这些注释符开头
COMMENT_MARKERS = ("--", "/*", "#")

# 兼容旧系统的指令别名
DIRECTIVE_ALIASES = {
    "Plot": "Chart",
    "Variable": "Variables",
    "Filter": "Filters",
    "Column": "Columns",
}

# 未指定 Type 时根据文件扩展名推断
EXTENSION_TYPES = {
    "sql": BackendType.RELATIONAL,
    "js": BackendType.DOCUMENT,
}


class HeaderParser:
    """报表头部解析器"""

    def __init__(self, registry: type = HeaderHandlerRegistry):
        """
        Args:
            registry: 指令处理器注册表
        """
        self.registry = registry

    def parse(
        self,
        definition: ReportDefinition,
        macros: Optional[Dict[str, Any]] = None
    ) -> ParseContext:
        """
        解析报表头部

        Args:
            definition: 报表定义
            macros: 调用方提供的宏变量（用于判断报表是否就绪）

        Returns:
            ParseContext，包含填充好的报表选项和就绪状态

        Raises:
            UnknownDirective: 如果头部包含未注册的指令
            UnknownReportType: 如果无法确定报表类型
        """
        context = ParseContext(definition.identifier, macros)

        first = True
        for line in definition.raw_headers.split("\n"):
            if not line:
                continue

            # 不以注释符开头的行不是头部
            if not line.startswith(COMMENT_MARKERS):
                continue

            line = self._strip_comment(line)
            if not line:
                continue

            if ":" not in line:
                if first:
                    # 第一行且不是 name: value 格式，视为报表名称
                    name, value = "Name", line
                else:
                    # 之后的非 name: value 行追加到描述
                    self._append_description(context.options, line)
                    continue
            else:
                name, value = self._split_directive(line)

            first = False
            self._dispatch(name, value, context)

        if context.options.type is None:
            context.options.type = self._infer_type(definition.identifier)

        logger.info(
            f"解析报表头部完成: report={definition.identifier}, "
            f"type={context.options.type.value}, ready={context.is_ready}"
        )
        return context

    def _dispatch(self, name: str, value: str, context: ParseContext):
        """将指令交给对应的处理器"""
        handler = self.registry.get_handler(name)
        logger.debug(f"头部指令: {name} = {value!r}")
        handler.parse(name, value, context)

    @staticmethod
    def _strip_comment(line: str) -> str:
        """去掉行首的注释符和行尾的块注释结束符"""
        line = line.lstrip("-*/#").strip()
        if line.endswith("*/"):
            line = line[:-2].rstrip()
        return line

    @staticmethod
    def _split_directive(line: str) -> Tuple[str, str]:
        """按第一个冒号拆分指令名和值"""
        name, value = line.split(":", 1)
        name = name.strip()
        value = value.strip()

        # 兼容旧系统的全大写指令名
        if name.upper() == name:
            name = name.lower().capitalize()

        name = DIRECTIVE_ALIASES.get(name, name)
        return name, value

    @staticmethod
    def _append_description(options: ReportOptions, line: str):
        if options.description:
            options.description += "\n" + line
        else:
            options.description = line

    @staticmethod
    def _infer_type(identifier: str) -> BackendType:
        """根据文件扩展名推断报表类型"""
        extension = os.path.splitext(identifier)[1].lstrip(".").lower()
        backend = EXTENSION_TYPES.get(extension)
        if backend is None:
            raise UnknownReportType(identifier=identifier)
        logger.debug(f"根据扩展名推断报表类型: {identifier} -> {backend.value}")
        return backend


def parse_headers(
    definition: ReportDefinition,
    macros: Optional[Dict[str, Any]] = None
) -> Tuple[ReportOptions, bool]:
    """解析报表头部，返回 (报表选项, 是否就绪)"""
    context = HeaderParser().parse(definition, macros)
    return context.options, context.is_ready
