"""
app_fixtures.py
---------------
被测应用入口相关的 fixture。

app.mode 决定用例访问哪个应用：
- live：访问 app.base_url 上真实运行的前端，后端接口按 mock 配置拦截 / 透传；
- demo：访问 app.demo_url，页面本身由路由拦截引擎返回 assets 目录下的 demo_app.html，
  不需要启动任何前端服务，适合本地快速回归和框架自测。
"""

import json
from dataclasses import asdict
from typing import Generator

import pytest
from playwright.sync_api import Page

from framework.core.config_loader import get_app_url
from framework.core.logger import get_logger
from framework.network.route_engine import (
    InterceptedRequest,
    MockResponse,
    RouteInterceptionEngine,
    RoutePattern,
)
from flows.auth_flow import AuthFlow
from utils.path_utils import get_asset_path

logger = get_logger()

DEMO_APP_FILE = "demo_app.html"


def serve_demo_app(engine: RouteInterceptionEngine, demo_url: str) -> None:
    """
    把演示应用挂到 demo_url 上，并 mock 它的分析接口。

    :param engine: 当前用例的路由拦截引擎
    :param demo_url: 演示应用地址，例如 http://transcripts.demo.test/
    """
    with open(get_asset_path(DEMO_APP_FILE), "r", encoding="utf-8") as f:
        html = f.read()

    root = demo_url.rstrip("/")
    engine.intercept(
        RoutePattern(url=f"{root}/{{,dashboard}}{{,?*}}", method="GET"),
        lambda request: MockResponse(status=200, body=html, content_type="text/html"),
        name="demo-app",
    )

    def analyze(request: InterceptedRequest) -> MockResponse:
        body = request.json()
        if not isinstance(body, dict) or not body.get("file"):
            return MockResponse.error(400, "missing_file")
        return MockResponse.json({"status": "completed", "file": body["file"]})

    engine.intercept(
        RoutePattern(url=f"{root}/api/transcripts/analyze", method="POST"),
        analyze,
        name="demo-app/analyze",
    )
    logger.info(f"[Demo] 演示应用已挂载: {demo_url}")


@pytest.fixture(scope="function")
def app_url(config: dict, route_engine: RouteInterceptionEngine) -> str:
    """
    当前用例要访问的应用地址。

    demo 模式下会先把演示应用注册到本用例的路由拦截引擎上。
    """
    url = get_app_url()
    if config.get("app", {}).get("mode") == "demo":
        serve_demo_app(route_engine, url)
    logger.info(f"[应用] 本用例访问: {url}")
    return url


@pytest.fixture(scope="function")
def logged_in_page(page: Page, app_url: str, account) -> Generator[Page, None, None]:
    """
    已登录、停留在首页的 Page fixture。

    每个用例都走一遍（mock 的）登录流程，不复用其他用例的登录态。
    """
    AuthFlow(page, base_url=app_url).login(account.username, account.password)
    yield page


def dump_ledger(engine: RouteInterceptionEngine) -> str:
    """把请求台账格式化成字符串，用于断言失败时输出。"""
    return json.dumps(
        [asdict(entry) for entry in engine.ledger], ensure_ascii=False, indent=2
    )
