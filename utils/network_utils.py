"""
network_utils.py
----------------
路由拦截用到的底层工具函数（不依赖浏览器，可单独做单元测试）。

主要能力：
1. 把 Playwright 风格的 URL glob 转成正则并做匹配；
2. 解析被拦截请求的 body（JSON 优先，解析不了就保留原文）；
3. 把 mock 响应体序列化成字符串。
"""

import json
import re
from functools import lru_cache
from typing import Any, Optional, Pattern, Tuple, Union

UrlMatcher = Union[str, Pattern[str]]

# 在正则中有特殊含义、需要转义的字符
_REGEX_SPECIAL = set("$^+.()|\\?[]")


@lru_cache(maxsize=256)
def glob_to_regex(glob: str) -> Pattern[str]:
    """
    把 URL glob 转成正则。

    规则（与 Playwright 的 page.route 一致）：
    - ``*``  匹配除 ``/`` 以外的任意字符；
    - ``**`` 匹配任意字符（包括 ``/``）；
    - ``{a,b}`` 表示二选一；
    - 其余字符（包括 ``?``）按字面匹配。

    :param glob: 例如 ``**/api/auth/login``
    :return: 编译后的正则，整串匹配
    """
    tokens = ["^"]
    in_group = False
    i = 0
    while i < len(glob):
        char = glob[i]
        if char == "*":
            star_count = 1
            while i + 1 < len(glob) and glob[i + 1] == "*":
                star_count += 1
                i += 1
            tokens.append(".*" if star_count > 1 else "[^/]*")
        elif char == "{":
            in_group = True
            tokens.append("(?:")
        elif char == "}" and in_group:
            in_group = False
            tokens.append(")")
        elif char == "," and in_group:
            tokens.append("|")
        elif char in _REGEX_SPECIAL:
            tokens.append("\\" + char)
        else:
            tokens.append(char)
        i += 1
    tokens.append("$")
    return re.compile("".join(tokens))


def url_matches(matcher: UrlMatcher, url: str) -> bool:
    """
    判断 URL 是否命中匹配规则。

    :param matcher: glob 字符串，或已编译的正则（正则按 search 语义匹配）
    :param url: 请求的完整 URL
    """
    if isinstance(matcher, str):
        return glob_to_regex(matcher).match(url) is not None
    return matcher.search(url) is not None


def decode_post_data(buffer: Optional[bytes]) -> Tuple[Any, Optional[str]]:
    """
    解析请求体。

    :param buffer: 原始请求体字节（Playwright 的 request.post_data_buffer）
    :return: (body, json_error)
             - 没有请求体：(None, "empty body")
             - 合法 JSON：(解析后的对象, None)
             - 非 JSON 文本：(原始字符串, 错误描述)
             - 非 UTF-8 二进制：(原始字节, 错误描述)
    """
    if not buffer:
        return None, "empty body"

    try:
        text = buffer.decode("utf-8")
    except UnicodeDecodeError:
        return buffer, "body is not utf-8 text"

    try:
        return json.loads(text), None
    except ValueError as e:
        return text, f"invalid json: {e}"


def encode_body(body: Any, content_type: str) -> Union[str, bytes]:
    """
    把响应体序列化成 route.fulfill 能接受的类型。

    JSON 类型的响应统一 json.dumps（保留中文），字符串 / 字节原样返回。
    """
    if isinstance(body, (str, bytes)):
        return body
    if "json" in content_type:
        return json.dumps(body, ensure_ascii=False)
    return str(body)
