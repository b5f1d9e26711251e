"""
全局 Pytest 配置与钩子。

- fixtures 以插件方式注册（见 pytest_plugins）；
- 用例执行失败时，把现场留在 pytest-html 报告里：
  整页截图、Playwright trace、以及本用例的 mock 请求台账。
"""

from pathlib import Path
from typing import Any, List, Optional

import pytest
import pytest_html
from playwright.sync_api import Error as PlaywrightError, Page

from framework.core.logger import get_logger
from framework.fixtures.app_fixtures import dump_ledger
from utils.path_utils import get_screenshot_path, get_trace_path

logger = get_logger()

pytest_plugins = [
    "framework.fixtures.browser_fixtures",  # config / account / playwright_instance / browser / context / route_engine / page
    "framework.fixtures.app_fixtures",      # app_url / logged_in_page
]

REPORT_ROOT = Path("reports")


def _report_link(path: str) -> str:
    """报告 HTML 位于 reports/ 下，附件用相对 reports/ 的路径引用。"""
    try:
        return Path(path).relative_to(REPORT_ROOT).as_posix()
    except ValueError:
        return Path(path).as_posix()


def _failed_page(item: pytest.Item) -> Optional[Page]:
    return item.funcargs.get("page") or item.funcargs.get("logged_in_page")


def _attach_screenshot(page: Page, item: pytest.Item, extras: List[Any]) -> None:
    path = get_screenshot_path(item.name)
    try:
        page.screenshot(path=path, full_page=True)
    except PlaywrightError as e:
        logger.error(f"[截图失败] {item.nodeid}: {e}")
        return
    logger.error(f"[截图] {path}")
    extras.append(pytest_html.extras.image(_report_link(path), mime_type="image/png"))


def _attach_trace(page: Page, item: pytest.Item, extras: List[Any]) -> None:
    path = get_trace_path(item.name)
    try:
        page.context.tracing.stop(path=path)
    except PlaywrightError as e:
        logger.error(f"[Tracing] 导出 trace 失败 {item.nodeid}: {e}")
        return
    logger.error(f"[Tracing] {path}")
    extras.append(
        pytest_html.extras.html(f'<a href="{_report_link(path)}" target="_blank">Playwright trace</a>')
    )


def _attach_ledger(item: pytest.Item, extras: List[Any]) -> None:
    engine = item.funcargs.get("route_engine")
    if engine is None or not engine.ledger:
        return
    extras.append(pytest_html.extras.text(dump_ledger(engine), name="mock ledger"))


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo) -> None:
    """
    只处理 call 阶段的失败；setup / teardown 阶段失败不截图。

    不使用浏览器的单元测试没有 page，直接跳过。
    """
    outcome = yield
    report = outcome.get_result()

    if report.when != "call" or not report.failed:
        return

    page = _failed_page(item)
    if page is None:
        return

    logger.error(f"[失败] {report.nodeid}，保存现场到报告")
    extras = getattr(report, "extras", [])
    _attach_screenshot(page, item, extras)
    _attach_trace(page, item, extras)
    _attach_ledger(item, extras)
    report.extras = extras
