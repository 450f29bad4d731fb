"""
列过滤器
在整形结果行时转换单元格的显示值，由 Filters 头部指令按列名或列位置指定
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, Optional, Type

from markupsafe import Markup

from ..utils.logger import get_logger

logger = get_logger(__name__)


class ColumnFilter(ABC):
    """列过滤器基类"""

    @abstractmethod
    def filter(self, column_key: str, value: Any) -> Any:
        """
        转换单元格的显示值

        Args:
            column_key: 列名
            value: 原始值

        Returns:
            转换后的值
        """
        pass


class NumberFilter(ColumnFilter):
    """千分位格式，小数保留两位"""

    def filter(self, column_key: str, value: Any) -> Any:
        if isinstance(value, bool) or value is None:
            return value
        if isinstance(value, int):
            return f"{value:,}"
        if isinstance(value, (float, Decimal)):
            return f"{value:,.2f}"
        try:
            number = float(str(value).strip())
        except ValueError:
            return value
        if number.is_integer() and "." not in str(value):
            return f"{int(number):,}"
        return f"{number:,.2f}"


class PercentFilter(ColumnFilter):
    """比例转百分比: 0.256 -> 25.6%"""

    def filter(self, column_key: str, value: Any) -> Any:
        if isinstance(value, bool) or value is None:
            return value
        try:
            number = float(value)
        except (TypeError, ValueError):
            return value
        return f"{number * 100:.1f}%"


class LinkFilter(ColumnFilter):
    """将值显示为链接"""

    def filter(self, column_key: str, value: Any) -> Any:
        if value is None or value == "":
            return value
        return Markup('<a href="{0}">{0}</a>').format(value)


class ImageFilter(ColumnFilter):
    """将值显示为图片"""

    def filter(self, column_key: str, value: Any) -> Any:
        if value is None or value == "":
            return value
        return Markup('<img src="{0}" alt="{1}">').format(value, column_key)


class MaskFilter(ColumnFilter):
    """脱敏，保留首尾字符，中间用星号替换"""

    def filter(self, column_key: str, value: Any) -> Any:
        if value is None:
            return value
        value = str(value)
        if len(value) <= 2:
            return '*' * len(value)
        return value[0] + '*' * (len(value) - 2) + value[-1]


class PhoneMaskFilter(MaskFilter):
    """手机号脱敏：保留前3位和后4位"""

    def filter(self, column_key: str, value: Any) -> Any:
        if value is None:
            return value
        value = str(value)
        if len(value) >= 7:
            return value[:3] + '*' * (len(value) - 7) + value[-4:]
        return super().filter(column_key, value)


class EmailMaskFilter(MaskFilter):
    """邮箱脱敏：保留第一个字符和@后的域名"""

    def filter(self, column_key: str, value: Any) -> Any:
        if value is None:
            return value
        value = str(value)
        if '@' not in value:
            return super().filter(column_key, value)
        local, domain = value.split('@', 1)
        if len(local) > 1:
            local = local[0] + '*' * (len(local) - 1)
        return f"{local}@{domain}"


class ColumnFilterRegistry:
    """列过滤器注册表"""

    # 注册的过滤器映射
    _filters: Dict[str, Type[ColumnFilter]] = {
        "number": NumberFilter,
        "percent": PercentFilter,
        "link": LinkFilter,
        "image": ImageFilter,
        "mask": MaskFilter,
        "phone": PhoneMaskFilter,
        "email": EmailMaskFilter,
    }

    @classmethod
    def get_filter(cls, name: str) -> Optional[ColumnFilter]:
        """
        根据名称获取过滤器实例

        Args:
            name: 过滤器名称

        Returns:
            过滤器实例，未注册时返回 None
        """
        filter_class = cls._filters.get(name)
        if not filter_class:
            logger.debug(f"列过滤器未注册，保持原值: {name}")
            return None
        return filter_class()

    @classmethod
    def register_filter(cls, name: str, filter_class: Type[ColumnFilter]):
        """
        注册新的列过滤器

        Args:
            name: 过滤器名称
            filter_class: 过滤器类
        """
        cls._filters[name] = filter_class

    @classmethod
    def unregister_filter(cls, name: str):
        cls._filters.pop(name, None)

    @classmethod
    def get_filter_names(cls) -> list:
        return list(cls._filters.keys())
