# pages/login_page.py
# -*- coding: utf-8 -*-
"""
login_page.py
-------------
登录表单的 Page Object（PO 层）。

设计要点：
1. 定位全部使用 get_by_role / get_by_label，依赖前端的可访问名称；
   这些名称是本框架与被测应用之间的稳定契约，前端改名属于破坏性变更；
2. 提交后默认以“登录接口返回”作为同步点，成功与否由上层等待对应的 UI 标记判断；
   前端校验拦下提交时没有请求可等，改为等按钮重新可用；
3. 状态查询方法供 Flow 层和用例层断言。
"""

import re
import time

from playwright.sync_api import Locator, TimeoutError as PlaywrightTimeoutError

from framework.core.base_page import BasePage
from framework.core.config_loader import get_config
from framework.core.errors import SyncTimeoutError
from framework.core.logger import get_logger
from framework.core.markers import ENABLED, UIMarker

logger = get_logger()

SIGN_IN_HEADING = UIMarker(
    name="sign-in heading visible",
    locate=lambda page: page.get_by_role("heading", name="Sign In", exact=True),
)
SIGN_IN_BUTTON_ENABLED = UIMarker(
    name="sign-in button enabled",
    locate=lambda page: page.get_by_role("button", name=re.compile(r"sign in", re.I)),
    state=ENABLED,
)


class LoginPage(BasePage):
    """登录表单 Page 对象，继承 BasePage。"""

    # ========== 内部 Locator 获取方法 ==========

    def _username_input(self) -> Locator:
        return self.page.get_by_label(re.compile(r"username", re.I))

    def _password_input(self) -> Locator:
        return self.page.get_by_label(re.compile(r"password", re.I))

    def _sign_in_button(self) -> Locator:
        return SIGN_IN_BUTTON_ENABLED.locate(self.page)

    def _login_api_url(self) -> str:
        api_base = get_config().get("mock", {}).get("api_base", "**/api")
        return f"{api_base.rstrip('/')}/auth/login"

    # ========== 对外操作方法（供 Flow 层调用） ==========

    def input_username(self, username: str) -> None:
        self.fill(self._username_input(), "username input", username)

    def input_password(self, password: str) -> None:
        self.fill(self._password_input(), "password input", password, secret=True)

    def submit_credentials(self, username: str, password: str, expect_request: bool = True) -> int | None:
        """
        填写账号密码并点击“Sign In”。

        登录是否成功不在这里判断：成功由首页标记决定，失败由登录表单仍在决定。

        :param expect_request: 为 True 时以登录接口返回作为同步点；
            为 False 时不要求发出请求（前端校验可能直接拦下提交），
            点击后等“Sign In”按钮重新可用，网络空闲只作辅助信号
        :return: 登录接口的 HTTP 状态码；expect_request=False 时为 None
        :raises SyncTimeoutError: 上限内没有收到登录接口的响应，或按钮没有恢复可用
        """
        self.input_username(username)
        self.input_password(password)

        if not expect_request:
            self.click(self._sign_in_button(), "Sign In button")
            self.wait_network_idle()
            self.wait_for(SIGN_IN_BUTTON_ENABLED, operation="submit-credentials")
            logger.info("[登录] 已提交，不等待登录接口（结果由页面状态判断）")
            return None

        login_url = self._login_api_url()
        start = time.monotonic()
        try:
            with self.page.expect_response(login_url, timeout=self.long_timeout) as response_info:
                self.click(self._sign_in_button(), "Sign In button")
        except PlaywrightTimeoutError as e:
            elapsed = int((time.monotonic() - start) * 1000)
            logger.error(f"[登录] {elapsed}ms 内没有收到登录接口响应: {login_url}")
            raise SyncTimeoutError(
                "submit-credentials", f"response of {login_url}", self.long_timeout, elapsed
            ) from e

        status = response_info.value.status
        logger.info(f"[登录] 登录接口返回 status={status}")
        return status

    # ========== 状态封装（供用例层断言） ==========

    def verify_still_on_sign_in(self, timeout: int | None = None) -> None:
        """
        登录失败后的状态：登录标题仍在，且“Sign In”按钮可再次点击。

        :raises SyncTimeoutError: 任一标记未成立
        """
        self.wait_for(
            SIGN_IN_HEADING, timeout=timeout or self.long_timeout, operation="verify-login-failed"
        )
        self.wait_for(SIGN_IN_BUTTON_ENABLED, timeout=timeout, operation="verify-login-failed")

    def is_sign_in_heading_visible(self) -> bool:
        return self.is_present(SIGN_IN_HEADING)

    def is_sign_in_button_enabled(self) -> bool:
        return self.is_present(SIGN_IN_BUTTON_ENABLED)
