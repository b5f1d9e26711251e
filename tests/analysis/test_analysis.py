# tests/analysis/test_analysis.py
# -*- coding: utf-8 -*-
"""
test_analysis.py
----------------
上传转录文件 -> 选项目 -> 选目的地 -> 分析 的场景。

设计要点：
1. 前置登录由 logged_in_page fixture 完成；
2. 每一步都有对应的 UI 标记，步骤失败会带着步骤名中止整个场景；
3. 分析按钮只有在前置步骤全部完成后才可用；
4. Busy 状态超过上限一定失败，不会被当作成功（演示应用的 ?analysis=stall 模式）。
"""

import pytest
from playwright.sync_api import Page

from framework.core.errors import ScenarioStepError, SyncTimeoutError
from framework.core.logger import get_logger
from framework.fixtures.app_fixtures import dump_ledger
from flows.analysis_flow import AnalysisFlow
from flows.auth_flow import AuthFlow
from pages.analysis_page import ANALYZE_ENABLED, AnalysisPage

logger = get_logger()

pytestmark = [pytest.mark.analysis_flow, pytest.mark.browser]

TRANSCRIPT_FILE = "transcript-file.txt"


@pytest.fixture
def demo_only(config):
    if config.get("app", {}).get("mode") != "demo":
        pytest.skip("只在 demo 模式下执行（依赖演示应用的行为）")


def test_upload_and_analyze(logged_in_page: Page, config, route_engine):
    logger.info("[用例] test_upload_and_analyze 开始执行")

    AnalysisFlow(logged_in_page).upload_and_analyze(TRANSCRIPT_FILE)

    if config.get("app", {}).get("mode") == "demo":
        analyses = route_engine.requests(url="**/api/transcripts/analyze", method="POST")
        assert [entry.status for entry in analyses] == [200], dump_ledger(route_engine)


def test_analyze_blocked_without_file(logged_in_page: Page):
    AnalysisFlow(logged_in_page).verify_analyze_blocked()

    assert not AnalysisPage(logged_in_page).is_present(ANALYZE_ENABLED, timeout=1000)


def test_analyze_unlocks_only_after_every_step(logged_in_page: Page):
    analysis = AnalysisPage(logged_in_page)

    analysis.upload_transcript(TRANSCRIPT_FILE)
    analysis.verify_analyze_blocked()

    analysis.choose_project()
    analysis.verify_analyze_blocked()

    analysis.choose_destination()
    assert analysis.is_analyze_enabled(), "三个步骤都完成后 Analyze Now 应该可用"


def test_missing_transcript_aborts_scenario(logged_in_page: Page):
    flow = AnalysisFlow(logged_in_page)

    with pytest.raises(ScenarioStepError) as exc_info:
        flow.upload_and_analyze("no-such-transcript.txt")

    assert exc_info.value.scenario == "AnalysisFlow"
    assert "上传文件" in exc_info.value.step
    assert isinstance(exc_info.value.cause, FileNotFoundError)


def test_stalled_analysis_times_out(demo_only, page: Page, app_url, account):
    AuthFlow(page, base_url=f"{app_url}?analysis=stall").login(account.username, account.password)

    with pytest.raises(ScenarioStepError) as exc_info:
        AnalysisFlow(page).upload_and_analyze(TRANSCRIPT_FILE, processing_timeout=2000)

    cause = exc_info.value.cause
    assert "Analyze Now" in exc_info.value.step
    assert isinstance(cause, SyncTimeoutError)
    assert cause.timeout_ms == 2000
    assert cause.elapsed_ms >= 1500
