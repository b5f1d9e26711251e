# pages/landing_page.py
# -*- coding: utf-8 -*-
"""
landing_page.py
---------------
落地页（未登录首页）的 Page Object。
"""

from framework.core.base_page import BasePage
from framework.core.config_loader import get_app_url
from framework.core.markers import UIMarker
from pages.login_page import SIGN_IN_HEADING

SIGN_IN_LINK = UIMarker(
    name="sign-in link visible",
    locate=lambda page: page.get_by_role("link", name="Sign In", exact=True),
)


class LandingPage(BasePage):
    """落地页：只负责打开应用和进入登录表单。"""

    def open_landing(self, base_url: str | None = None) -> None:
        """
        打开应用入口，并等待“Sign In”链接出现。

        :param base_url: 应用地址，未传则使用配置（demo_url 或 base_url）
        """
        url = base_url or get_app_url()
        if not url:
            raise ValueError("未配置应用地址，请设置 BASE_URL 或 app.base_url")
        self.open(url)
        self.wait_for(SIGN_IN_LINK, timeout=self.long_timeout, operation="navigate-to-landing")

    def click_sign_in(self) -> None:
        """点击“Sign In”链接，等待登录表单标题出现。"""
        self.click(SIGN_IN_LINK.locate(self.page), "Sign In link")
        self.wait_for(SIGN_IN_HEADING, operation="open-sign-in")
