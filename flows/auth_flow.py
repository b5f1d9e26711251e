# flows/auth_flow.py
# -*- coding: utf-8 -*-
"""
auth_flow.py
------------
登录 / 退出登录业务流程（Flow 层）。
"""

from playwright.sync_api import Page

from framework.core.accounts import get_default_account
from framework.core.base_flow import BaseFlow
from framework.core.logger import get_logger
from pages.dashboard_page import DashboardPage
from pages.landing_page import LandingPage
from pages.login_page import LoginPage

logger = get_logger()


class AuthFlow(BaseFlow):
    """
    登录业务流程类。

    继承 BaseFlow，复用 step() 的日志和失败包装能力。
    """

    def __init__(self, page: Page, base_url: str | None = None):
        """
        :param page: pytest fixture 提供的 Page 实例
        :param base_url: 应用地址，未传则由 LandingPage 从配置中读取
        """
        super().__init__(page)
        self.base_url = base_url
        self.landing_page = LandingPage(page)
        self.login_page = LoginPage(page)
        self.dashboard_page = DashboardPage(page)

    def _submit(self, username: str, password: str, expect_request: bool = True) -> int | None:
        with self.step("打开应用首页"):
            self.landing_page.open_landing(self.base_url)

        with self.step("进入登录表单"):
            self.landing_page.click_sign_in()

        with self.step(f"提交账号密码：{username}"):
            return self.login_page.submit_credentials(username, password, expect_request=expect_request)

    def login(self, username: str | None = None, password: str | None = None) -> None:
        """
        登录并等待首页标记出现；标记在上限内没出现则整个场景失败。

        - 传了 username/password：用你传的账号密码；
        - 没传：使用默认账号（环境变量 / 配置文件）。
        """
        if username is None or password is None:
            account = get_default_account()
            username, password = account.username, account.password
            logger.info(f"[流程] 使用默认账号登录: username={username}")

        self._submit(username, password)

        with self.step("等待首页加载完成"):
            self.dashboard_page.wait_until_loaded()

        logger.info("[流程] 登录成功，已进入首页")

    def attempt_login(self, username: str, password: str, expect_request: bool = True) -> int | None:
        """
        只执行登录操作，不断言结果（负向用例使用，调用方再检查页面状态）。

        :param expect_request: 前端会拦下提交（例如必填项为空）时传 False，
            不再等待登录接口
        :return: 登录接口的 HTTP 状态码；expect_request=False 时为 None
        """
        status = self._submit(username, password, expect_request=expect_request)
        logger.info(f"[流程] 登录尝试已完成，接口 status={status}（结果由上层断言）")
        return status

    def verify_dashboard(self) -> None:
        with self.step("校验首页已加载"):
            self.dashboard_page.wait_until_loaded()

    def verify_login_failed(self) -> None:
        """登录失败：仍停留在登录表单，按钮可再次点击。"""
        with self.step("校验仍停留在登录表单"):
            self.login_page.verify_still_on_sign_in()

    def sign_out(self) -> None:
        """退出登录并在确认弹窗中确认，等待回到登录表单。"""
        with self.step("退出登录"):
            self.dashboard_page.sign_out()
