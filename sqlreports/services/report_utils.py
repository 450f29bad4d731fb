"""
报表服务工具函数
"""
from typing import Any, Iterable, List, Mapping, Optional, Union

ColumnRef = Union[int, str]


def coerce_column_ref(ref: Any) -> ColumnRef:
    """
    将列引用规范化：纯数字字符串视为从1开始的列位置，其余视为列名
    
    Args:
        ref: 列名或列位置
    
    Returns:
        int（列位置）或 str（列名）
    """
    if isinstance(ref, bool):
        return str(ref)
    if isinstance(ref, int):
        return ref
    ref = str(ref).strip()
    if ref.isdigit():
        return int(ref)
    return ref


def coerce_column_refs(refs: Any) -> List[ColumnRef]:
    """将单个或多个列引用规范化为列表"""
    if refs is None:
        return []
    if not isinstance(refs, (list, tuple)):
        refs = [refs]
    return [coerce_column_ref(ref) for ref in refs]


def lookup_by_key_or_position(
    mapping: Mapping[ColumnRef, Any],
    key: str,
    position: int
) -> Optional[Any]:
    """
    先按列名查找，找不到时按从1开始的列位置查找
    
    Args:
        mapping: 以列名或列位置为键的映射
        key: 列名
        position: 列位置（从1开始）
    
    Returns:
        找到的值，否则为 None
    """
    if key in mapping:
        return mapping[key]
    return mapping.get(position)


def matches_key_or_position(refs: Iterable[ColumnRef], key: str, position: int) -> bool:
    """判断列名或列位置是否出现在列引用列表中"""
    refs = list(refs)
    return key in refs or position in refs
