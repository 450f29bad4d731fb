"""
服务层包
"""
from .exceptions import (
    ReportError,
    DefinitionNotFound,
    MissingHeaderBlock,
    UnknownDirective,
    UnknownReportType,
    InvalidDirectiveValue,
    NotReady,
    ConnectionFailed,
    ExecutionFailed,
    UnsupportedBackend,
    TemplateNotFound,
)
from .dto import (
    BackendType,
    ReportDefinition,
    ReportOptions,
    ChartOptions,
    VariableSpec,
    FilterSpec,
    DatabaseChoice,
    TableCell,
    TableRow,
    ChartCell,
    ChartRow,
    ConnectionDescriptor,
)
from .header_handlers import HeaderHandler, HeaderHandlerRegistry, ParseContext
from .header_parser import HeaderParser, parse_headers
from .macro_expander import MacroExpander, get_macro_expander
from .column_filters import ColumnFilter, ColumnFilterRegistry
from .row_shaper import RowShaper
from .encryption_service import EncryptionService, get_encryption_service
from .connection_registry import ConnectionRegistry, save_connection
from .query_executor import QueryExecutor
from .report_repository import ReportRepository
from .template_renderer import TemplateRenderer
from .report_service import (
    ReportService,
    PreparedReport,
    create_report_service,
    get_report_service,
)

__all__ = [
    "ReportError",
    "DefinitionNotFound",
    "MissingHeaderBlock",
    "UnknownDirective",
    "UnknownReportType",
    "InvalidDirectiveValue",
    "NotReady",
    "ConnectionFailed",
    "ExecutionFailed",
    "UnsupportedBackend",
    "TemplateNotFound",
    "BackendType",
    "ReportDefinition",
    "ReportOptions",
    "ChartOptions",
    "VariableSpec",
    "FilterSpec",
    "DatabaseChoice",
    "TableCell",
    "TableRow",
    "ChartCell",
    "ChartRow",
    "ConnectionDescriptor",
    "HeaderHandler",
    "HeaderHandlerRegistry",
    "ParseContext",
    "HeaderParser",
    "parse_headers",
    "MacroExpander",
    "get_macro_expander",
    "ColumnFilter",
    "ColumnFilterRegistry",
    "RowShaper",
    "EncryptionService",
    "get_encryption_service",
    "ConnectionRegistry",
    "save_connection",
    "QueryExecutor",
    "ReportRepository",
    "TemplateRenderer",
    "ReportService",
    "PreparedReport",
    "create_report_service",
    "get_report_service",
]
