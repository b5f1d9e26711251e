"""
browser_fixtures.py
-------------------
浏览器、上下文、路由拦截引擎相关的 pytest fixture。

生命周期：
    playwright_instance (session)
        -> browser (function)
            -> context (function, 自带 tracing / 可选视频、HAR)
                -> route_engine (function, 唯一的 "**/*" 拦截入口)
                    -> page (function)

每个用例一套独立的 context + route_engine：mock 规则、请求台账、登录态都不会
跨用例泄漏，pytest -n 并行时各 worker 之间也互不影响。
"""
from typing import Any, Dict, Generator

import pytest
from playwright.sync_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    sync_playwright,
)

from framework.core.accounts import Account, get_default_account
from framework.core.config_loader import get_config
from framework.core.logger import get_logger
from framework.network.mock_catalog import register_all_mocks
from framework.network.route_engine import RouteInterceptionEngine
from utils.path_utils import get_har_path, get_video_dir

logger = get_logger()

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


def _context_options(config: Dict[str, Any], test_name: str) -> Dict[str, Any]:
    """
    根据配置拼装 browser.new_context() 的参数。

    report.record_video / report.record_har 控制是否录制视频和 HAR
    （环境变量 UI_RECORD_VIDEO / UI_RECORD_HAR 可覆盖）。
    """
    options: Dict[str, Any] = {"base_url": config.get("app", {}).get("base_url", "")}
    report_cfg = config.get("report", {})

    if report_cfg.get("record_video"):
        options["record_video_dir"] = get_video_dir()
        logger.info(f"[Context] 录制视频 -> {options['record_video_dir']}")

    if report_cfg.get("record_har"):
        options["record_har_path"] = get_har_path(test_name)
        options["record_har_mode"] = "minimal"
        # 只记录接口请求，页面和静态资源不进 HAR
        options["record_har_url_filter"] = f"{config.get('mock', {}).get('api_base', '**/api')}/**"
        logger.info(f"[Context] 记录 HAR -> {options['record_har_path']}")

    return options


@pytest.fixture(scope="session")
def config() -> Dict[str, Any]:
    """整个测试进程共用的只读配置。"""
    cfg = get_config()
    logger.info(f"[配置] 当前环境: {cfg.get('env')}, 应用模式: {cfg.get('app', {}).get('mode')}")
    return cfg


@pytest.fixture(scope="session")
def account() -> Account:
    """默认登录账号（环境变量 LOGIN_USER / LOGIN_PASSWORD 优先）。"""
    return get_default_account()


@pytest.fixture(scope="session")
def playwright_instance() -> Generator[Playwright, None, None]:
    logger.info("[Playwright] 启动 Playwright 服务")
    with sync_playwright() as playwright:
        yield playwright
    logger.info("[Playwright] 关闭 Playwright 服务")


@pytest.fixture(scope="function")
def browser(playwright_instance: Playwright, config: Dict[str, Any]) -> Generator[Browser, None, None]:
    """
    每个用例独立启动一个浏览器。

    本机没有安装对应浏览器时跳过用例，提示先执行 playwright install。
    """
    browser_cfg = config.get("browser", {})
    browser_type = browser_cfg.get("type", "chromium")
    if browser_type not in SUPPORTED_BROWSERS:
        raise ValueError(f"不支持的浏览器类型: {browser_type}，可选: {', '.join(SUPPORTED_BROWSERS)}")

    launch_args = {
        "headless": browser_cfg.get("headless", True),
        "slow_mo": browser_cfg.get("slow_mo", 0),
    }
    logger.info(f"[Browser] 启动 {browser_type}: {launch_args}")

    try:
        instance = getattr(playwright_instance, browser_type).launch(**launch_args)
    except PlaywrightError as e:
        pytest.skip(f"{browser_type} 无法启动（是否执行过 playwright install {browser_type}？）: {e}")

    yield instance

    logger.info(f"[Browser] 关闭 {browser_type}")
    instance.close()


@pytest.fixture(scope="function")
def context(
    browser: Browser, config: Dict[str, Any], request: pytest.FixtureRequest
) -> Generator[BrowserContext, None, None]:
    """
    用例独享的 BrowserContext。

    - 全程开启 tracing，失败时由 conftest 里的 hook 导出 trace 文件；
    - 默认操作超时取 timeout.medium，导航超时取 timeout.long。
    """
    context = browser.new_context(**_context_options(config, request.node.name))
    context.tracing.start(screenshots=True, snapshots=True, sources=True)

    timeout_cfg = config.get("timeout", {})
    context.set_default_timeout(timeout_cfg.get("medium", 15000))
    context.set_default_navigation_timeout(timeout_cfg.get("long", 60000))
    logger.info(f"[Context] 已创建: {request.node.name}")

    yield context

    # 失败用例的 tracing 已经在 hook 里停过了，这里再停会报错
    try:
        context.tracing.stop()
    except PlaywrightError as e:
        logger.debug(f"[Tracing] tracing 已停止: {e}")

    context.close()
    logger.info(f"[Context] 已关闭: {request.node.name}")


@pytest.fixture(scope="function")
def route_engine(
    context: BrowserContext, config: Dict[str, Any]
) -> Generator[RouteInterceptionEngine, None, None]:
    """
    当前用例独享的路由拦截引擎。

    mock.enabled 为 true 时预先注册登录 + 首页资源的 mock；
    用例可以继续 route_engine.intercept(...) 追加规则（排在默认规则之后）。
    """
    engine = RouteInterceptionEngine(context)
    if config.get("mock", {}).get("enabled", True):
        register_all_mocks(engine)

    yield engine

    engine.teardown()


@pytest.fixture(scope="function")
def page(context: BrowserContext, route_engine: RouteInterceptionEngine) -> Page:
    """
    用例使用的 Page。

    依赖 route_engine，保证页面发出第一个请求之前拦截规则已经就位。
    """
    return context.new_page()
