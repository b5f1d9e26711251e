# tests/sync/test_ui_markers.py
# -*- coding: utf-8 -*-
"""
test_ui_markers.py
------------------
UI 标记等待与前置检查，在 page.set_content 写入的页面上验证。

设计要点：
1. 状态是延迟切换的（setTimeout），不能假设点击后立即生效；
2. 标记在上限内没出现 -> SyncTimeoutError，错误里带操作名、标记名、上限；
3. 控件不可见 / 不可用 -> PreconditionError，不会继续点击；
4. 长耗时按钮：Busy 超过上限没消失一定失败，不会被当成成功。
"""

import pytest
from playwright.sync_api import Page

from framework.core.base_page import BasePage
from framework.core.errors import PreconditionError, SyncTimeoutError
from framework.core.markers import HIDDEN, UIMarker
from pages.analysis_page import ANALYZE_BUSY, ANALYZE_BUSY_CLEARED, AnalysisPage

pytestmark = pytest.mark.browser

DELAYED_HEADING_HTML = """
<button id="show" onclick="setTimeout(() => {
    const h = document.createElement('h1');
    h.textContent = 'Ready';
    document.body.appendChild(h);
}, 300)">Show</button>
"""

DELAYED_ENABLE_HTML = """
<button id="target" disabled onclick="document.title = 'clicked'">Target</button>
<script>setTimeout(() => { document.getElementById('target').disabled = false; }, 300);</script>
"""

# busy_ms 毫秒后恢复；busy_ms < 0 表示一直忙
LONG_RUNNING_HTML = """
<button id="analyze">Analyze Now</button>
<script>
  const button = document.getElementById('analyze');
  button.addEventListener('click', () => {
    button.textContent = 'Analyzing...';
    button.disabled = true;
    if (BUSY_MS >= 0) {
      setTimeout(() => { button.textContent = 'Analyze Now'; button.disabled = false; }, BUSY_MS);
    }
  });
</script>
"""

READY_HEADING = UIMarker(name="ready heading visible", locate=lambda page: page.get_by_role("heading", name="Ready"))


def _long_running(page: Page, busy_ms: int) -> AnalysisPage:
    page.set_content(LONG_RUNNING_HTML.replace("BUSY_MS", str(busy_ms)))
    return AnalysisPage(page)


def test_wait_for_delayed_marker(page: Page):
    base = BasePage(page)
    page.set_content(DELAYED_HEADING_HTML)

    base.click(page.get_by_role("button", name="Show"), "Show button")
    elapsed = base.wait_for(READY_HEADING, timeout=5000, operation="show-heading")

    assert 0 <= elapsed < 5000


def test_missing_marker_raises_sync_timeout(page: Page):
    base = BasePage(page)
    page.set_content("<p>nothing here</p>")

    with pytest.raises(SyncTimeoutError) as exc_info:
        base.wait_for(READY_HEADING, timeout=500, operation="show-heading")

    error = exc_info.value
    assert error.operation == "show-heading"
    assert error.marker == READY_HEADING.name
    assert error.timeout_ms == 500
    assert error.elapsed_ms >= 400


def test_hidden_marker(page: Page):
    base = BasePage(page)
    page.set_content('<div role="dialog">Pick</div><button onclick="document.querySelector(\'[role=dialog]\').remove()">Close</button>')
    dialog_closed = UIMarker(name="dialog closed", locate=lambda p: p.get_by_role("dialog"), state=HIDDEN)

    assert not base.is_present(dialog_closed, timeout=300)
    base.click(page.get_by_role("button", name="Close"), "Close button")
    base.wait_for(dialog_closed, timeout=2000, operation="close-dialog")


def test_disabled_control_fails_precondition(page: Page):
    base = BasePage(page)
    page.set_content('<button disabled onclick="document.title = \'clicked\'">Analyze Now</button>')

    with pytest.raises(PreconditionError) as exc_info:
        base.click(page.get_by_role("button", name="Analyze Now"), "Analyze Now button", timeout=500)

    assert exc_info.value.expected_state == "enabled"
    assert page.title() != "clicked"


def test_invisible_control_fails_precondition(page: Page):
    base = BasePage(page)
    page.set_content('<button style="display: none">Sign In</button>')

    with pytest.raises(PreconditionError) as exc_info:
        base.click(page.locator("button"), "Sign In button", timeout=500)

    assert exc_info.value.expected_state == "visible"
    assert exc_info.value.control == "Sign In button"


def test_precondition_waits_for_control_to_become_enabled(page: Page):
    base = BasePage(page)
    page.set_content(DELAYED_ENABLE_HTML)

    base.click(page.get_by_role("button", name="Target"), "Target button", timeout=5000)

    assert page.title() == "clicked"


def test_is_present_does_not_raise(page: Page):
    base = BasePage(page)
    page.set_content("<p>empty</p>")

    assert base.is_present(READY_HEADING, timeout=300) is False


def test_network_idle_is_only_a_signal(page: Page):
    base = BasePage(page)
    page.set_content("<p>static</p>")

    assert base.wait_network_idle(timeout=5000) is True


class TestLongRunningButton:
    """Disabled -> Enabled -> Busy -> Enabled。"""

    def test_busy_too_short_to_observe_still_succeeds(self, page: Page):
        analysis = _long_running(page, busy_ms=0)

        analysis.click_analyze_now(timeout=5000)

        assert analysis.is_analyze_enabled()

    def test_busy_cleared_within_bound(self, page: Page):
        analysis = _long_running(page, busy_ms=1000)

        analysis.click_analyze_now(timeout=5000)

        assert analysis.is_analyze_enabled()

    def test_busy_outlasting_bound_fails(self, page: Page):
        analysis = _long_running(page, busy_ms=3000)

        with pytest.raises(SyncTimeoutError) as exc_info:
            analysis.click_analyze_now(timeout=1000)

        assert exc_info.value.marker == ANALYZE_BUSY_CLEARED.name
        assert exc_info.value.timeout_ms == 1000

    def test_endless_busy_fails(self, page: Page):
        analysis = _long_running(page, busy_ms=-1)

        with pytest.raises(SyncTimeoutError) as exc_info:
            analysis.click_analyze_now(timeout=800)

        assert exc_info.value.operation == "trigger-long-running-action"
        assert analysis.is_present(ANALYZE_BUSY, timeout=300)
