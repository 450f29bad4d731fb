"""
结果行整形测试
"""
from sqlreports.services.dto import ChartOptions, FilterSpec, ReportOptions
from sqlreports.services.row_shaper import RowShaper


def shape(raw_rows, **kwargs) -> ReportOptions:
    options = ReportOptions(name="test", raw_rows=raw_rows, **kwargs)
    return RowShaper().shape(options)


def chart_keys(options: ReportOptions, row: int = 0):
    return [cell.key for cell in options.chart_rows[row].values]


class TestChartMembership:
    """测试列是否进入图表"""

    def test_no_chart_includes_all_columns(self):
        options = shape([{"a": 1, "b": 2, "c": 3}])
        assert chart_keys(options) == ["a", "b", "c"]

    def test_y_without_x_keeps_first_column(self):
        options = shape([{"a": 1, "b": 2, "c": 3}], chart=ChartOptions(y=["b"]))
        assert chart_keys(options) == ["a", "b"]

    def test_x_replaces_first_column(self):
        options = shape([{"a": 1, "b": 2, "c": 3}], chart=ChartOptions(x=["c"], y=["b"]))
        assert chart_keys(options) == ["b", "c"]

    def test_positions(self):
        options = shape([{"a": 1, "b": 2, "c": 3}], chart=ChartOptions(x=[2], y=[3]))
        assert chart_keys(options) == ["b", "c"]

    def test_chart_cells_first_flag(self):
        options = shape([{"a": 1, "b": 2}], chart=ChartOptions(y=["b"]))
        assert [cell.first for cell in options.chart_rows[0].values] == [True, False]


class TestTotalRow:
    """测试合计行"""

    ROWS = [
        {"region": "north", "amount": 10},
        {"region": "south", "amount": 20},
        {"region": " TOTAL ", "amount": 30},
    ]

    def test_total_row_omitted_from_chart_only(self):
        options = shape(self.ROWS, chart=ChartOptions(omit_total=True))
        assert len(options.rows) == 3
        assert len(options.chart_rows) == 2
        assert options.rows[2].values[0].value == " TOTAL "

    def test_total_row_kept_without_omit_total(self):
        options = shape(self.ROWS, chart=ChartOptions())
        assert len(options.chart_rows) == 3

    def test_none_first_value_is_not_total(self):
        options = shape([{"region": None, "amount": 1}], chart=ChartOptions(omit_total=True))
        assert len(options.chart_rows) == 1


class TestRowFlags:

    def test_first_row_flags_are_independent(self):
        rows = [
            {"region": "TOTAL", "amount": 30},
            {"region": "north", "amount": 10},
            {"region": "south", "amount": 20},
        ]
        options = shape(rows, chart=ChartOptions(omit_total=True))
        assert [row.first for row in options.rows] == [True, False, False]
        assert [row.first for row in options.chart_rows] == [True, False]

    def test_empty_result(self):
        options = shape([])
        assert options.rows == []
        assert options.chart_rows == []


class TestColumnClass:

    def test_raw_class_on_first_column_for_every_row(self):
        options = shape([{"html": "<b>1</b>", "n": 1}, {"html": "<i>2</i>", "n": 2}], columns=["raw"])
        for row in options.rows:
            first, second = row.values
            assert first.raw is True
            assert first.css_class == "raw"
            assert first.first is True
            assert second.raw is False
            assert second.css_class is None

    def test_pre_class(self):
        options = shape([{"a": 1, "note": "x\ny"}], columns=[None, "pre"])
        cell = options.rows[0].values[1]
        assert cell.pre is True
        assert cell.raw is False


class TestFilters:

    def test_filter_by_position(self):
        options = shape([{"region": "north", "orders": 1200}], filters={2: FilterSpec(filter="number")})
        cell = options.rows[0].values[1]
        assert cell.value == "1,200"
        assert cell.alt == 1200

    def test_key_takes_precedence_over_position(self):
        filters = {"ratio": FilterSpec(filter="percent"), 1: FilterSpec(filter="number")}
        options = shape([{"ratio": 0.5}], filters=filters)
        assert options.rows[0].values[0].value == "50.0%"

    def test_unregistered_filter_passes_value_through(self):
        options = shape([{"a": 5}], filters={"a": FilterSpec(filter="does-not-exist")})
        assert options.rows[0].values[0].value == 5

    def test_chart_uses_filtered_value(self):
        options = shape([{"a": "x", "b": 1000}], filters={"b": FilterSpec(filter="number")})
        assert options.chart_rows[0].values[1].value == "1,000"
