"""
宏展开
将查询模板中的 {{name}} 占位符替换为调用方提供的值，
兼容旧系统的 {name} 写法
"""
import re
from typing import Any, Dict, Optional

from jinja2 import Environment, TemplateSyntaxError

from .exceptions import ExecutionFailed
from ..utils.logger import get_logger

logger = get_logger(__name__)

# 单花括号占位符，且前后不紧挨其他花括号
LEGACY_PLACEHOLDER = re.compile(r"(?<!\{)\{([A-Za-z0-9_]+)\}(?!\})")

# 只启用 {{ }} 变量标签，块标签和注释标签换成查询和HTML中不会出现的字符序列，
# 使 SQL 中的 {% 和 {# 原样保留
DISABLED_TAGS = {
    "block_start_string": "\x00{%",
    "block_end_string": "%}\x00",
    "comment_start_string": "\x00{#",
    "comment_end_string": "#}\x00",
}


class MacroExpander:
    """宏展开器，替换工作交给 Jinja2 完成"""

    def __init__(self):
        self._text_env = self._build_env(autoescape=False)
        self._html_env = self._build_env(autoescape=True)

    @staticmethod
    def _build_env(autoescape: bool) -> Environment:
        return Environment(keep_trailing_newline=True, autoescape=autoescape, **DISABLED_TAGS)

    @staticmethod
    def normalize(text: str) -> str:
        """
        将 {name} 改写为 {{name}}

        Args:
            text: 查询模板

        Returns:
            统一为双花括号占位符的文本
        """
        return LEGACY_PLACEHOLDER.sub(r"{{\1}}", text)

    def expand(
        self,
        text: str,
        macros: Optional[Dict[str, Any]] = None,
        escape_html: bool = False
    ) -> str:
        """
        展开文本中的宏

        Args:
            text: 包含占位符的文本
            macros: 宏变量，缺失的变量渲染为空字符串
            escape_html: 是否对替换的值进行 HTML 转义

        Returns:
            替换后的文本

        Raises:
            ExecutionFailed: 占位符语法错误
        """
        if not text:
            return text

        env = self._html_env if escape_html else self._text_env
        try:
            template = env.from_string(self.normalize(text))
        except TemplateSyntaxError as e:
            logger.error(f"宏语法错误: line={e.lineno}, error={e.message}")
            raise ExecutionFailed(f"宏语法错误（第{e.lineno}行）: {e.message}")
        return template.render(macros or {})


# 全局宏展开器实例
_macro_expander = None


def get_macro_expander() -> MacroExpander:
    """获取全局宏展开器实例"""
    global _macro_expander
    if _macro_expander is None:
        _macro_expander = MacroExpander()
    return _macro_expander
