"""
工具模块
"""
