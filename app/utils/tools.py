"""
本文件用于提供通用工具函数：从模型回复中提取 JSON 对象、生成关键词组标题等。
主要函数:
- `extract_json_object`: 从自由文本中提取第一个可解析的 JSON 对象
- `find_balanced_end`: 查找与指定 `{` 配对的 `}` 位置（忽略字符串内的括号）
- `build_keyword_set_title`: 根据关键词生成关键词组标题
- `today_str`: 当天日期字符串（YYYY-MM-DD）
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional

from app.core.exceptions import ParseError


def find_balanced_end(text: str, start: int) -> Optional[int]:
    """
    输入:
    - `text`: 原始文本
    - `start`: `{` 所在下标

    输出:
    - 与之配对的 `}` 下标；括号不闭合时返回 None

    作用:
    - 按嵌套层级扫描，跳过 JSON 字符串内部（含转义）的括号
    """

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def _iter_object_spans(text: str) -> Iterator[str]:
    pos = text.find("{")
    while pos != -1:
        end = find_balanced_end(text, pos)
        if end is not None:
            yield text[pos : end + 1]
        pos = text.find("{", pos + 1)


def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """
    输入:
    - `text`: 模型返回的自由文本（可能带有前后说明文字或 ``` 代码块）

    输出:
    - 第一个能被解析为 JSON 对象的 `{...}` 片段

    作用:
    - 宽松提取模型输出中的 JSON；前置说明里出现的花括号不会干扰结果
    - 找不到可解析片段时抛出 `ParseError`
    """

    if not text or "{" not in text:
        raise ParseError()

    for span in _iter_object_spans(text):
        try:
            data = json.loads(span)
        except ValueError:
            continue
        if isinstance(data, dict):
            return data

    raise ParseError()


def build_keyword_set_title(keywords: List[str]) -> str:
    """
    输入:
    - `keywords`: 关键词列表

    输出:
    - 前两个关键词以 ` · ` 连接；超过两个时追加 ` 외 N`
    """

    title = " · ".join(keywords[:2])
    if len(keywords) > 2:
        title += f" 외 {len(keywords) - 2}"
    return title


def today_str(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).date().isoformat()


def date_part(value: Any) -> str:
    """将 datetime/date/ISO 字符串统一转换为 `YYYY-MM-DD`。"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and value:
        return value.split("T")[0][:10]
    return today_str()
