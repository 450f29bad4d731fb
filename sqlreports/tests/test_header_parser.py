"""
报表头部解析测试
"""
import pytest

from sqlreports.services.dto import BackendType, ReportDefinition
from sqlreports.services.exceptions import (
    InvalidDirectiveValue,
    UnknownDirective,
    UnknownReportType,
)
from sqlreports.services.header_handlers import HeaderHandler, HeaderHandlerRegistry
from sqlreports.services.header_parser import HeaderParser, parse_headers


def make_definition(headers: str, identifier: str = "sales.sql", body: str = "SELECT 1") -> ReportDefinition:
    return ReportDefinition(identifier=identifier, raw_headers=headers, raw_body=body)


def parse(headers: str, identifier: str = "sales.sql", macros=None):
    return HeaderParser().parse(make_definition(headers, identifier), macros)


class TestNameAndDescription:
    """测试报表名称和描述"""

    def test_first_line_without_colon_is_name(self):
        context = parse("-- Monthly Sales\n-- Type: sql")
        assert context.options.name == "Monthly Sales"
        assert context.options.description is None

    def test_later_lines_without_colon_append_description(self):
        headers = (
            "-- Monthly Sales\n"
            "-- Orders grouped by month\n"
            "-- Type: sql\n"
            "-- Refunds are excluded"
        )
        context = parse(headers)
        assert context.options.name == "Monthly Sales"
        assert context.options.description == "Orders grouped by month\nRefunds are excluded"

    def test_colon_less_line_after_directive_is_description(self):
        context = parse("-- Type: sql\n-- Just a note")
        assert context.options.name == "sales.sql"
        assert context.options.description == "Just a note"

    def test_description_directive_accumulates(self):
        context = parse("-- Name: Sales\n-- Description: first\n-- Description: second")
        assert context.options.description == "first\nsecond"

    def test_name_defaults_to_identifier(self):
        context = parse("-- Type: sql", identifier="reports/orders.sql")
        assert context.options.name == "reports/orders.sql"


class TestHeaderLines:
    """测试头部行的识别"""

    @pytest.mark.parametrize("line", [
        "-- Name: Sales",
        "# Name: Sales",
        "/* Name: Sales */",
        "/* Name: Sales",
    ])
    def test_comment_markers(self, line):
        assert parse(line).options.name == "Sales"

    def test_lines_without_marker_are_skipped(self):
        context = parse("Name: Ignored\n-- Name: Sales\n\n   ")
        assert context.options.name == "Sales"

    def test_empty_comment_lines_are_skipped(self):
        context = parse("--\n-- Sales\n--   \n-- Summary")
        assert context.options.name == "Sales"
        assert context.options.description == "Summary"

    def test_value_split_on_first_colon(self):
        context = parse("-- Name: Sales: 2024")
        assert context.options.name == "Sales: 2024"

    def test_upper_case_directive_is_normalized(self):
        context = parse("-- NAME: Sales\n-- TYPE: sql")
        assert context.options.name == "Sales"
        assert context.options.type == BackendType.RELATIONAL

    def test_plot_is_alias_for_chart(self):
        context = parse('-- Plot: {"y": ["total"]}')
        assert context.options.chart.y == ["total"]

    def test_unknown_directive_fails(self):
        with pytest.raises(UnknownDirective) as exc_info:
            parse("-- Name: Sales\n-- Colour: red")
        assert exc_info.value.directive == "Colour"
        assert "Colour" in exc_info.value.message


class TestReportType:
    """测试报表类型"""

    def test_explicit_type(self):
        context = parse("-- Type: mongo", identifier="sales.sql")
        assert context.options.type == BackendType.DOCUMENT

    def test_type_inferred_from_extension(self):
        assert parse("-- Name: a", identifier="a.sql").options.type == BackendType.RELATIONAL
        assert parse("-- Name: a", identifier="a.js").options.type == BackendType.DOCUMENT

    def test_unrecognized_extension_fails(self):
        with pytest.raises(UnknownReportType):
            parse("-- Name: a", identifier="a.txt")

    def test_unknown_type_value_fails(self):
        with pytest.raises(UnknownReportType, match="oracle"):
            parse("-- Type: oracle")


class TestReadiness:
    """测试变量与报表就绪状态"""

    def test_no_variables_is_ready(self):
        options, is_ready = parse_headers(make_definition("-- Name: Sales"))
        assert is_ready

    def test_missing_variable_is_not_ready(self):
        context = parse("-- Variables: start, Start Date, date")
        assert not context.is_ready
        assert context.missing_variables == ["start"]
        spec = context.options.variables["start"]
        assert spec.name == "Start Date"
        assert spec.type == "date"

    def test_provided_variables_are_ready(self):
        headers = '-- Variables: {"start": {"type": "date"}, "region": "Region"}'
        context = parse(headers, macros={"start": "2024-01-01", "region": "north"})
        assert context.is_ready
        assert context.options.variables["region"].name == "Region"


class TestDirectiveValues:
    """测试各指令的值"""

    def test_filters_numeric_keys_become_positions(self):
        context = parse('-- Filters: {"2": "number", "amount": {"filter": "percent"}}')
        filters = context.options.filters
        assert filters[2].filter == "number"
        assert filters["amount"].filter == "percent"
        assert "2" not in filters

    def test_filters_shorthand(self):
        context = parse("-- Filters: email, email\n-- Filters: 3, number")
        assert context.options.filters["email"].filter == "email"
        assert context.options.filters[3].filter == "number"

    def test_columns(self):
        context = parse("-- Columns: raw, , pre")
        assert context.options.columns == ["raw", None, "pre"]

    def test_chart(self):
        context = parse('-- Chart: {"x": "region", "y": [2, "amount"], "omit-total": true}')
        chart = context.options.chart
        assert chart.x == ["region"]
        assert chart.y == [2, "amount"]
        assert chart.omit_total is True

    def test_empty_chart(self):
        chart = parse("-- Chart:").options.chart
        assert chart.x is None and chart.y is None
        assert chart.omit_total is False

    def test_template(self):
        assert parse("-- Template: chart").options.template == "chart"
        assert parse("-- Name: Sales").options.template == "table"

    def test_invalid_json_fails(self):
        with pytest.raises(InvalidDirectiveValue):
            parse('-- Chart: {"y": [1,')

    def test_empty_template_fails(self):
        with pytest.raises(InvalidDirectiveValue):
            parse("-- Template:")

    def test_database(self):
        assert parse("-- Database: warehouse").options.database == "warehouse"


class OwnerHeader(HeaderHandler):
    def parse(self, name, value, context):
        context.options.description = f"Owner: {value}"


def test_registered_handler_is_used():
    HeaderHandlerRegistry.register_handler("Owner", OwnerHeader)
    try:
        context = parse("-- Owner: finance")
        assert context.options.description == "Owner: finance"
    finally:
        HeaderHandlerRegistry.unregister_handler("Owner")

    assert not HeaderHandlerRegistry.is_registered("Owner")


class TestChartOmitTotal:
    """测试 omit-total 的取值"""

    @pytest.mark.parametrize("raw,expected", [
        ("true", True),
        ("false", False),
        ('"false"', False),
        ('"TRUE"', True),
    ])
    def test_accepted_values(self, raw, expected):
        chart = parse('-- Chart: {"omit-total": %s}' % raw).options.chart
        assert chart.omit_total is expected

    @pytest.mark.parametrize("raw", ['"no"', "1", "null"])
    def test_rejected_values(self, raw):
        with pytest.raises(InvalidDirectiveValue, match="omit-total"):
            parse('-- Chart: {"omit-total": %s}' % raw)
