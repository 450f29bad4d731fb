"""
API路由模块
"""
from .reports import router as reports_router

__all__ = [
    "reports_router",
]
