# tests/unit/conftest.py
# -*- coding: utf-8 -*-
"""
单元测试用的假 Playwright 对象。

路由拦截引擎只用到 request 的 url / method / headers / post_data_buffer，
以及 route 的 fulfill / fallback，所以不需要启动浏览器就能验证匹配语义。
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

from framework.network.route_engine import RouteInterceptionEngine


class FakeRequest:
    """模拟 playwright.sync_api.Request 中引擎用到的字段。"""

    def __init__(
        self,
        url: str,
        method: str = "GET",
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.url = url
        self.method = method
        self.headers = headers or {}
        if body is None or isinstance(body, bytes):
            self.post_data_buffer = body
        elif isinstance(body, str):
            self.post_data_buffer = body.encode("utf-8")
        else:
            self.post_data_buffer = json.dumps(body).encode("utf-8")


@dataclass
class Outcome:
    """一次 handle() 调用的结果。"""

    route: MagicMock
    fulfilled: bool
    status: Optional[int] = None
    body: Any = None
    kwargs: Dict[str, Any] = field(default_factory=dict)

    @property
    def fell_back(self) -> bool:
        return self.route.fallback.called


@pytest.fixture
def fake_context() -> MagicMock:
    return MagicMock(name="BrowserContext")


@pytest.fixture
def engine(fake_context):
    engine = RouteInterceptionEngine(fake_context)
    yield engine
    engine.teardown()


@pytest.fixture
def dispatch(engine):
    """
    把一个假请求交给引擎处理，返回 Outcome。

    用法：dispatch("POST", "http://app.test/api/auth/login", body={...})
    """

    def _dispatch(method: str, url: str, body: Any = None, headers=None) -> Outcome:
        route = MagicMock(name="Route")
        engine.handle(route, FakeRequest(url, method=method, body=body, headers=headers))
        if not route.fulfill.called:
            return Outcome(route=route, fulfilled=False)

        kwargs = route.fulfill.call_args.kwargs
        payload = kwargs["body"]
        if "json" in kwargs["content_type"]:
            payload = json.loads(payload)
        return Outcome(
            route=route, fulfilled=True, status=kwargs["status"], body=payload, kwargs=kwargs
        )

    return _dispatch


@pytest.fixture
def make_request():
    return FakeRequest
