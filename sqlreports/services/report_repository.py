"""
报表定义加载
从报表目录读取报表文件并拆分为头部和查询
"""
from pathlib import Path
from typing import Union

from .dto import ReportDefinition
from .exceptions import DefinitionNotFound, MissingHeaderBlock
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ReportRepository:
    """报表定义仓库"""

    def __init__(self, report_dir: Union[str, Path]):
        """
        Args:
            report_dir: 报表目录
        """
        self.report_dir = Path(report_dir).resolve()

    def _resolve(self, identifier: str) -> Path:
        path = (self.report_dir / identifier).resolve()
        # 报表目录之外的文件视为不存在
        if path != self.report_dir and self.report_dir not in path.parents:
            raise DefinitionNotFound(identifier)
        if not path.is_file():
            raise DefinitionNotFound(identifier)
        return path

    def load(self, identifier: str) -> ReportDefinition:
        """
        加载报表定义

        Args:
            identifier: 报表标识（相对于报表目录的路径）

        Returns:
            ReportDefinition

        Raises:
            DefinitionNotFound: 报表文件不存在
            MissingHeaderBlock: 报表没有用空行分隔的头部
        """
        path = self._resolve(identifier)

        raw = path.read_text(encoding="utf-8")
        # 统一换行符
        raw = raw.replace("\r\n", "\n").replace("\r", "\n")

        if "\n\n" not in raw:
            raise MissingHeaderBlock(identifier)

        raw_headers, raw_body = raw.split("\n\n", 1)
        logger.debug(f"加载报表定义: {path}")
        return ReportDefinition(identifier=identifier, raw_headers=raw_headers, raw_body=raw_body)
