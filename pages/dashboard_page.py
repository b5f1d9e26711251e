# pages/dashboard_page.py
# -*- coding: utf-8 -*-
"""
dashboard_page.py
-----------------
登录后首页（Dashboard）的 Page Object。
"""

import re

from playwright.sync_api import expect

from framework.core.base_page import BasePage
from framework.core.logger import get_logger
from framework.core.markers import UIMarker
from pages.login_page import SIGN_IN_HEADING

logger = get_logger()

DASHBOARD_HEADING = UIMarker(
    name="dashboard heading visible",
    locate=lambda page: page.get_by_role(
        "heading", name=re.compile(r"start processing your meeting transcripts now", re.I)
    ),
)
SIGN_OUT_DIALOG = UIMarker(
    name="sign-out confirmation dialog visible",
    locate=lambda page: page.get_by_role("dialog"),
)

DASHBOARD_URL = re.compile(r"dashboard")


class DashboardPage(BasePage):
    """首页：登录成功标记、退出登录。"""

    def wait_until_loaded(self, timeout: int | None = None) -> None:
        """
        等待首页标题出现（登录成功的唯一判定条件）。

        URL 是否包含 /dashboard 只做辅助检查：SPA 可能不改地址，不满足时只记警告。
        """
        self.wait_for(
            DASHBOARD_HEADING,
            timeout=timeout or self.long_timeout,
            operation="wait-for-dashboard-marker",
        )
        try:
            expect(self.page).to_have_url(DASHBOARD_URL, timeout=self.short_timeout)
        except AssertionError:
            logger.warning(f"[辅助信号] 首页已渲染，但 URL 未包含 dashboard: {self.page.url}")

    def is_loaded(self) -> bool:
        return self.is_present(DASHBOARD_HEADING)

    def sign_out(self) -> None:
        """点击“Sign Out”，在确认弹窗中再次确认，等待回到登录表单。"""
        self.click(
            self.page.get_by_role("button", name=re.compile(r"sign out", re.I)),
            "Sign Out button",
        )
        self.wait_for(SIGN_OUT_DIALOG, operation="sign-out-with-confirmation")

        dialog = SIGN_OUT_DIALOG.locate(self.page)
        self.click(
            dialog.get_by_role("button", name="Sign Out", exact=True),
            "Sign Out confirm button",
        )
        self.wait_for(
            SIGN_IN_HEADING, timeout=self.long_timeout, operation="sign-out-with-confirmation"
        )
