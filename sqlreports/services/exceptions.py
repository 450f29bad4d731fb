"""
报表异常定义
所有报表渲染流程中的错误都会中止当前渲染，由调用方决定如何展示
"""
from typing import Any, Dict, Optional


class ReportError(Exception):
    """报表错误基类"""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        """
        Args:
            message: 错误消息（可直接展示给调用方）
            context: 额外的上下文信息（指令名、模板路径、数据库名等）
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class DefinitionNotFound(ReportError):
    """报表定义文件不存在"""

    def __init__(self, identifier: str):
        super().__init__(f"报表不存在: {identifier}", {"report": identifier})
        self.identifier = identifier


class MissingHeaderBlock(ReportError):
    """报表缺少头部（没有空行分隔头部和查询）"""

    def __init__(self, identifier: str):
        super().__init__(f"报表缺少头部: {identifier}", {"report": identifier})


class UnknownDirective(ReportError):
    """未知的头部指令"""

    def __init__(self, directive: str):
        super().__init__(f"未知的头部指令: {directive}", {"directive": directive})
        self.directive = directive


class UnknownReportType(ReportError):
    """无法确定报表类型"""

    def __init__(self, report_type: Optional[str] = None, identifier: Optional[str] = None):
        if report_type:
            message = f"未知的报表类型: {report_type}"
        else:
            message = f"无法推断报表类型: {identifier}"
        super().__init__(message, {"type": report_type, "report": identifier})


class InvalidDirectiveValue(ReportError):
    """头部指令的值格式错误"""

    def __init__(self, directive: str, value: str, reason: str):
        super().__init__(
            f"头部指令 {directive} 的值无效: {reason}",
            {"directive": directive, "value": value}
        )
        self.directive = directive


class NotReady(ReportError):
    """报表未就绪（缺少必需的变量）"""

    def __init__(self, missing: Optional[list] = None):
        missing = missing or []
        message = "报表未就绪，缺少变量"
        if missing:
            message += f": {', '.join(missing)}"
        super().__init__(message, {"missing": missing})
        self.missing = missing


class ConnectionFailed(ReportError):
    """无法连接数据库"""

    def __init__(self, database: Optional[str], error: str):
        super().__init__(f"无法连接数据库 {database}: {error}", {"database": database})
        self.error = error


class ExecutionFailed(ReportError):
    """查询执行失败"""

    def __init__(self, error: str, statement: Optional[str] = None):
        super().__init__(f"查询失败: {error}", {"statement": statement})
        self.error = error


class UnsupportedBackend(ReportError):
    """后端尚未实现"""

    def __init__(self, backend: str):
        super().__init__(f"不支持的后端: {backend}", {"backend": backend})


class TemplateNotFound(ReportError):
    """输出模板不存在"""

    def __init__(self, path: str):
        super().__init__(f"报表模板不存在: {path}", {"path": path})
        self.path = path
