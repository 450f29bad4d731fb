"""
数据传输对象 (Data Transfer Objects)
"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any, Union


class BackendType(str, Enum):
    """报表后端类型"""
    RELATIONAL = "relational"
    DOCUMENT = "document"


class ReportDefinition(BaseModel):
    """报表定义（加载后不可变）"""
    model_config = ConfigDict(frozen=True)

    identifier: str
    raw_headers: str
    raw_body: str


class VariableSpec(BaseModel):
    """报表需要的输入变量"""
    name: Optional[str] = None
    type: Optional[str] = None
    # 选项可以是数组，也可以是对象（按值使用）
    options: Optional[Union[List[Any], Dict[str, Any]]] = None


class FilterSpec(BaseModel):
    """列过滤器"""
    filter: str


class ChartOptions(BaseModel):
    """图表配置，x/y 中的元素可以是列名或从1开始的列位置"""
    model_config = ConfigDict(populate_by_name=True)

    x: Optional[List[Union[int, str]]] = None
    y: Optional[List[Union[int, str]]] = None
    omit_total: bool = Field(default=False, alias="omit-total")


class DatabaseChoice(BaseModel):
    """数据库选择项（用于切换数据库的表单）"""
    name: str
    selected: bool = False


class TableCell(BaseModel):
    """表格单元格"""
    key: str
    value: Any = None
    alt: Any = None  # 过滤前的原始值
    css_class: Optional[str] = None
    first: bool = False
    raw: bool = False
    pre: bool = False


class TableRow(BaseModel):
    """表格行"""
    values: List[TableCell] = Field(default_factory=list)
    first: bool = False


class ChartCell(BaseModel):
    """图表单元格"""
    key: str
    value: Any = None
    first: bool = False


class ChartRow(BaseModel):
    """图表行"""
    values: List[ChartCell] = Field(default_factory=list)
    first: bool = False


class ReportOptions(BaseModel):
    """
    报表选项
    
    由头部解析器创建并填充，查询执行器补充结果字段，最后由行整形器生成展示数据。
    每次报表渲染独占一个实例。
    """
    name: str = ""
    description: Optional[str] = None
    type: Optional[BackendType] = None
    database: Optional[str] = None
    databases: List[DatabaseChoice] = Field(default_factory=list)
    variables: Dict[str, VariableSpec] = Field(default_factory=dict)
    filters: Dict[Union[int, str], FilterSpec] = Field(default_factory=dict)
    columns: List[Optional[str]] = Field(default_factory=list)
    chart: Optional[ChartOptions] = None
    template: str = "table"

    # 执行后填充
    query: Optional[str] = None
    query_formatted: Optional[str] = None
    time: Optional[float] = None
    count: Optional[int] = None
    raw_rows: List[Dict[str, Any]] = Field(default_factory=list)
    rows: List[TableRow] = Field(default_factory=list)
    chart_rows: List[ChartRow] = Field(default_factory=list)


class ConnectionDescriptor(BaseModel):
    """已配置的数据库连接"""
    model_config = ConfigDict(frozen=True)

    name: str
    type: str  # sqlite, mysql, postgresql, mongodb
    url: str
    username: Optional[str] = None
    password: Optional[str] = None


class VariableField(BaseModel):
    """变量输入表单中的一个字段"""
    key: str
    name: str
    type: str = "string"
    value: Any = None
    is_select: bool = False
    options: List[Dict[str, Any]] = Field(default_factory=list)
