"""
报表相关API路由
"""
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from ..services.report_service import get_report_service
from ..services.exceptions import (
    ReportError,
    DefinitionNotFound,
    TemplateNotFound,
    NotReady,
    MissingHeaderBlock,
    UnknownDirective,
    UnknownReportType,
    InvalidDirectiveValue,
    ConnectionFailed,
    ExecutionFailed,
    UnsupportedBackend,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["reports"])

# 查询参数中用于选择数据库连接的参数名，其余参数都作为宏变量
DATABASE_PARAM = "database"

ERROR_STATUS = [
    ((DefinitionNotFound, TemplateNotFound), status.HTTP_404_NOT_FOUND),
    ((NotReady,), status.HTTP_400_BAD_REQUEST),
    ((MissingHeaderBlock, UnknownDirective, UnknownReportType, InvalidDirectiveValue),
     status.HTTP_422_UNPROCESSABLE_ENTITY),
    ((ConnectionFailed, ExecutionFailed), status.HTTP_502_BAD_GATEWAY),
    ((UnsupportedBackend,), status.HTTP_501_NOT_IMPLEMENTED),
]


# ============ Helpers ============

def _split_params(request: Request):
    """拆分查询参数为 (宏变量, 数据库连接名称)"""
    macros = dict(request.query_params)
    database = macros.pop(DATABASE_PARAM, None) or None
    return macros, database


def _to_http_exception(identifier: str, error: ReportError) -> HTTPException:
    for error_types, status_code in ERROR_STATUS:
        if isinstance(error, error_types):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    logger.error(f"报表处理失败: report={identifier}, error={error.message}")
    return HTTPException(status_code=status_code, detail=error.message)


# ============ API Endpoints ============

@router.get("/reports/{identifier:path}", response_class=HTMLResponse)
def render_report_page(identifier: str, request: Request):
    """
    渲染报表页面
    
    查询参数作为宏变量传入报表，database 参数用于切换数据库连接。
    报表缺少变量时只显示变量输入表单。
    """
    macros, database = _split_params(request)
    logger.info(f"收到报表页面请求: report={identifier}, database={database}")

    try:
        html = get_report_service().render_page(identifier, macros, database)
    except ReportError as e:
        raise _to_http_exception(identifier, e)

    return HTMLResponse(content=html)


@router.get("/api/reports/{identifier:path}")
def run_report(identifier: str, request: Request) -> Dict[str, Any]:
    """
    执行报表并返回JSON格式的报表选项（包含结果行和图表行）
    """
    macros, database = _split_params(request)
    logger.info(f"收到报表执行请求: report={identifier}, database={database}")

    service = get_report_service()
    try:
        prepared = service.prepare(identifier, macros, database)
        options = service.run(prepared)
    except ReportError as e:
        raise _to_http_exception(identifier, e)

    return {"report": identifier, **options.model_dump(mode="json", by_alias=True)}
