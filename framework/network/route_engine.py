# -*- coding: utf-8 -*-
"""
route_engine.py
---------------
按浏览器上下文（BrowserContext）隔离的请求拦截引擎。

设计要点：
1. 每个 BrowserContext 只挂一个 "**/*" 处理函数，规则列表由引擎自己维护，
   不依赖 Playwright "后注册先执行" 的顺序；
2. 规则按注册顺序匹配，先命中先生效；resolver 返回 None 表示放弃处理，
   继续尝试下一条规则，全部放弃则 route.fallback() 透传到真实网络；
3. resolver 抛出的任何异常（包括请求体解析失败）都转成 400 + {"error": ...}，
   不会让用例因为 mock 层异常而崩溃，也不会伪造 5xx；
4. 每个引擎有自己的请求台账（ledger），teardown() 时清空，供用例断言；
5. resolve() 不依赖浏览器，匹配语义可以单独做单元测试。
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from playwright.sync_api import BrowserContext, Request, Route

from framework.core.errors import MalformedBodyError
from framework.core.logger import get_logger
from utils.network_utils import UrlMatcher, decode_post_data, encode_body, url_matches

logger = get_logger()

CATCH_ALL = "**/*"


@dataclass(frozen=True)
class RoutePattern:
    """
    拦截规则的匹配条件：URL（glob 或正则）+ HTTP 方法。

    method 为 None 时匹配任意方法。
    """

    url: UrlMatcher
    method: Optional[str] = None

    def matches(self, url: str, method: str) -> bool:
        if self.method and self.method.upper() != method.upper():
            return False
        return url_matches(self.url, url)

    def __str__(self) -> str:
        url = self.url if isinstance(self.url, str) else self.url.pattern
        return f"{self.method or '*'} {url}"


@dataclass
class InterceptedRequest:
    """
    被拦截请求的只读快照，传给 resolver。

    body: JSON 能解析时为解析结果，否则为原始文本 / 字节，没有请求体时为 None。
    """

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    json_error: Optional[str] = None

    @classmethod
    def from_playwright(cls, request: Request) -> "InterceptedRequest":
        body, json_error = decode_post_data(request.post_data_buffer)
        headers = {k.lower(): v for k, v in (request.headers or {}).items()}
        return cls(
            method=request.method.upper(),
            url=request.url,
            headers=headers,
            body=body,
            json_error=json_error,
        )

    def json(self) -> Any:
        """
        按 JSON 读取请求体。

        :raises MalformedBodyError: 没有请求体或不是合法 JSON
        """
        if self.json_error:
            raise MalformedBodyError(self.json_error)
        return self.body

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


@dataclass
class MockResponse:
    """resolver 产出的合成响应。"""

    status: int = 200
    body: Any = None
    content_type: str = "application/json"
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def json(cls, payload: Any, status: int = 200) -> "MockResponse":
        return cls(status=status, body=payload)

    @classmethod
    def error(cls, status: int, error_key: str, message: str = "") -> "MockResponse":
        payload = {"error": error_key}
        if message:
            payload["message"] = message
        return cls(status=status, body=payload)


Resolver = Callable[[InterceptedRequest], Optional[MockResponse]]


@dataclass(frozen=True)
class MockRule:
    """一条拦截规则：匹配条件 + resolver。"""

    name: str
    pattern: RoutePattern
    resolver: Resolver


@dataclass(frozen=True)
class LedgerEntry:
    """
    请求台账中的一条记录。

    handled=False 表示命中了规则的匹配条件，但 resolver 放弃处理（透传）。
    """

    rule: str
    method: str
    url: str
    status: Optional[int]
    handled: bool


class RouteInterceptionEngine:
    """
    请求拦截引擎，生命周期与一个 BrowserContext 相同。

    用法示例：
        engine = RouteInterceptionEngine(context)
        engine.intercept("**/api/projects", lambda req: MockResponse.json([]), method="GET")
        ...
        engine.teardown()
    """

    def __init__(self, context: BrowserContext):
        """
        :param context: 当前用例独享的 BrowserContext
        """
        self._context = context
        self._rules: List[MockRule] = []
        self._ledger: List[LedgerEntry] = []
        self._attached = True
        # unroute 需要同一个处理函数对象
        self._handler = self.handle
        context.route(CATCH_ALL, self._handler)
        logger.debug("[Mock] 路由拦截引擎已挂载到 BrowserContext")

    # ========== 规则注册 ==========

    def intercept(
        self,
        pattern: Union[RoutePattern, UrlMatcher],
        resolver: Resolver,
        method: Optional[str] = None,
        name: Optional[str] = None,
    ) -> MockRule:
        """
        注册一条拦截规则（追加在已有规则之后）。

        :param pattern: RoutePattern，或 URL glob / 正则
        :param resolver: request -> MockResponse | None
        :param method: pattern 不是 RoutePattern 时使用的 HTTP 方法
        :param name: 日志与台账中显示的规则名，默认用 pattern 的字符串形式
        """
        if not self._attached:
            raise RuntimeError("路由拦截引擎已 teardown，不能再注册规则")

        if not isinstance(pattern, RoutePattern):
            pattern = RoutePattern(url=pattern, method=method)
        elif method is not None:
            raise ValueError("pattern 已经是 RoutePattern 时不能再单独传 method")

        rule = MockRule(name=name or str(pattern), pattern=pattern, resolver=resolver)
        self._rules.append(rule)
        logger.info(f"[Mock] 注册拦截规则 #{len(self._rules)}: {rule.name}")
        return rule

    def teardown(self) -> None:
        """移除上下文上的处理函数，清空规则和台账。可重复调用。"""
        if not self._attached:
            return
        self._attached = False
        logger.debug(
            f"[Mock] 卸载路由拦截引擎: rules={len(self._rules)}, ledger={len(self._ledger)}"
        )
        self._context.unroute(CATCH_ALL, self._handler)
        self._rules.clear()
        self._ledger.clear()

    @property
    def rules(self) -> Tuple[MockRule, ...]:
        return tuple(self._rules)

    # ========== 台账 ==========

    @property
    def ledger(self) -> Tuple[LedgerEntry, ...]:
        return tuple(self._ledger)

    def requests(
        self, url: Optional[UrlMatcher] = None, method: Optional[str] = None
    ) -> List[LedgerEntry]:
        """
        按 URL / 方法过滤台账。

        :param url: glob 或正则，None 表示不过滤
        :param method: HTTP 方法，None 表示不过滤
        """
        return [
            entry
            for entry in self._ledger
            if (method is None or entry.method == method.upper())
            and (url is None or url_matches(url, entry.url))
        ]

    # ========== 匹配与处理 ==========

    def resolve(
        self, url: str, method: str, build_request: Callable[[], InterceptedRequest]
    ) -> Tuple[Optional[MockRule], Optional[MockResponse]]:
        """
        按注册顺序查找第一条能处理该请求的规则。

        :param url: 请求 URL
        :param method: 请求方法
        :param build_request: 构造 InterceptedRequest 的函数，只有命中规则时才会调用
        :return: (rule, response)；全部规则都放弃时返回 (None, None)
        """
        request: Optional[InterceptedRequest] = None
        method = method.upper()

        for rule in list(self._rules):
            if not rule.pattern.matches(url, method):
                continue

            try:
                if request is None:
                    request = build_request()
                response = rule.resolver(request)
            except MalformedBodyError as e:
                logger.warning(f"[Mock] 规则 {rule.name} 请求体无法解析: {e.reason}")
                response = MockResponse.error(400, e.error_key, e.reason)
            except Exception as e:  # noqa: BLE001
                logger.warning(
                    f"[Mock] 规则 {rule.name} 处理 {method} {url} 时抛出异常: "
                    f"{type(e).__name__}: {e}"
                )
                response = MockResponse.error(400, "mock_resolution_failed", str(e))

            if response is None:
                self._record(rule, method, url, None)
                continue

            self._record(rule, method, url, response.status)
            return rule, response

        return None, None

    def handle(self, route: Route, request: Request) -> None:
        """挂在 BrowserContext 上的处理函数：命中则 fulfill，否则透传。"""
        rule, response = self.resolve(
            request.url,
            request.method,
            lambda: InterceptedRequest.from_playwright(request),
        )

        if response is None:
            route.fallback()
            return

        logger.info(
            f"[Mock] {request.method} {request.url} -> {response.status} (规则: {rule.name})"
        )
        route.fulfill(
            status=response.status,
            headers=response.headers or None,
            content_type=response.content_type,
            body=encode_body(response.body, response.content_type),
        )

    def _record(self, rule: MockRule, method: str, url: str, status: Optional[int]) -> None:
        self._ledger.append(
            LedgerEntry(
                rule=rule.name,
                method=method,
                url=url,
                status=status,
                handled=status is not None,
            )
        )
