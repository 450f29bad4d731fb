"""
模板渲染
使用 Jinja2 渲染报表输出模板和变量输入表单
"""
from pathlib import Path
from typing import Any, Dict, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape
from jinja2 import TemplateNotFound as JinjaTemplateNotFound

from .exceptions import TemplateNotFound
from ..utils.logger import get_logger

logger = get_logger(__name__)

TEMPLATE_EXTENSION = ".html"


class TemplateRenderer:
    """模板渲染器"""

    def __init__(self, template_dir: Union[str, Path]):
        """
        Args:
            template_dir: 模板目录
        """
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(['html', 'xml'])
        )
        # 图表数据中的 Decimal、日期等值按字符串输出
        self.env.policies['json.dumps_kwargs'] = {'sort_keys': False, 'default': str}

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        渲染模板

        Args:
            template_name: 模板名称（不含扩展名）
            context: 模板变量

        Returns:
            渲染后的HTML

        Raises:
            TemplateNotFound: 模板不存在
        """
        filename = template_name + TEMPLATE_EXTENSION
        try:
            template = self.env.get_template(filename)
        except JinjaTemplateNotFound:
            raise TemplateNotFound(str(self.template_dir / filename))

        logger.debug(f"渲染模板: {filename}")
        return template.render(**context)
