"""
结果行整形
将查询返回的原始行转换为表格和图表两种展示数据
"""
from typing import Any, Dict, List, Optional, Tuple

from .column_filters import ColumnFilterRegistry
from .dto import ChartCell, ChartOptions, ChartRow, ReportOptions, TableCell, TableRow
from .report_utils import lookup_by_key_or_position, matches_key_or_position
from ..utils.logger import get_logger

logger = get_logger(__name__)

TOTAL_MARKER = "TOTAL"


class RowShaper:
    """结果行整形器"""

    def __init__(self, filter_registry: type = ColumnFilterRegistry):
        """
        Args:
            filter_registry: 列过滤器注册表
        """
        self.filter_registry = filter_registry

    def shape(self, options: ReportOptions) -> ReportOptions:
        """
        根据 raw_rows 生成 rows（表格）和 chart_rows（图表）

        Args:
            options: 已执行查询的报表选项

        Returns:
            填充了 rows 和 chart_rows 的报表选项
        """
        rows: List[TableRow] = []
        chart_rows: List[ChartRow] = []
        chart = options.chart or ChartOptions()

        for raw_row in options.raw_rows:
            table_cells, chart_cells = self._shape_row(raw_row, options, chart)

            if not self._is_omitted_total(raw_row, chart):
                chart_rows.append(ChartRow(values=chart_cells, first=not chart_rows))

            rows.append(TableRow(values=table_cells, first=not rows))

        options.rows = rows
        options.chart_rows = chart_rows

        logger.debug(f"结果行整形完成: rows={len(rows)}, chart_rows={len(chart_rows)}")
        return options

    def _shape_row(
        self,
        raw_row: Dict[str, Any],
        options: ReportOptions,
        chart: ChartOptions
    ) -> Tuple[List[TableCell], List[ChartCell]]:
        table_cells = []
        chart_cells = []

        for i, (key, value) in enumerate(raw_row.items(), start=1):
            css_class = self._column_class(options.columns, i)
            alt = value
            value = self._apply_filter(options, key, i, value)

            if self._in_chart(chart, key, i):
                chart_cells.append(ChartCell(key=key, value=value, first=(i == 1)))

            table_cells.append(TableCell(
                key=key,
                value=value,
                alt=alt,
                css_class=css_class,
                first=(i == 1),
                raw=(css_class == "raw"),
                pre=(css_class == "pre"),
            ))

        return table_cells, chart_cells

    @staticmethod
    def _is_omitted_total(raw_row: Dict[str, Any], chart: ChartOptions) -> bool:
        """合计行（第一列为 TOTAL）在设置了 omit-total 时不进入图表"""
        if not chart.omit_total or not raw_row:
            return False
        first_value = next(iter(raw_row.values()))
        if first_value is None:
            return False
        return str(first_value).strip() == TOTAL_MARKER

    @staticmethod
    def _in_chart(chart: ChartOptions, key: str, position: int) -> bool:
        """
        判断列是否进入图表

        1. 未设置 y 时所有列都进入图表
        2. 列名或列位置在 y 中
        3. 未设置 x 时第一列作为 x 轴
        4. 列名或列位置在 x 中
        """
        if chart.y is None:
            return True
        if matches_key_or_position(chart.y, key, position):
            return True
        if position == 1 and chart.x is None:
            return True
        if chart.x is not None and matches_key_or_position(chart.x, key, position):
            return True
        return False

    def _apply_filter(self, options: ReportOptions, key: str, position: int, value: Any) -> Any:
        spec = lookup_by_key_or_position(options.filters, key, position)
        if spec is None:
            return value

        column_filter = self.filter_registry.get_filter(spec.filter)
        if column_filter is None:
            return value
        return column_filter.filter(key, value)

    @staticmethod
    def _column_class(columns: List[Optional[str]], position: int) -> Optional[str]:
        if position - 1 < len(columns):
            return columns[position - 1]
        return None
