# framework/core/base_page.py
# -*- coding: utf-8 -*-
"""
base_page.py
------------
所有 Page Object 的基类，对 Playwright 的 Page 做一层抽象封装。

每个对外操作都遵循同一个模式：
1. 前置检查（可选）：触发控件必须可见、可用，否则立即抛 PreconditionError；
2. 交互：click / fill / set_input_files；
3. 后置等待：等待一个有名字的 UIMarker 成立，超时抛 SyncTimeoutError。

超时统一从配置读取（short / medium / long / processing），方法也支持传入自定义 timeout。
"""

import time

from playwright.sync_api import Locator, Page, TimeoutError as PlaywrightTimeoutError, expect

from framework.core.config_loader import get_config
from framework.core.errors import PreconditionError
from framework.core.logger import get_logger
from framework.core.markers import UIMarker, is_marker_present, wait_for_marker

logger = get_logger()


class BasePage:
    """
    Page Object 基类，所有页面类都应该继承该类。

    属性：
        page: Playwright 中的 Page 实例，表示当前浏览器标签页；
        short_timeout / medium_timeout / long_timeout / processing_timeout:
            从配置中读取的统一超时时间，单位毫秒。
    """

    def __init__(self, page: Page):
        """
        初始化 BasePage。

        :param page: Playwright Page 实例，由 pytest fixture 传入
        """
        self.page = page

        timeout_cfg = get_config().get("timeout", {})
        self.short_timeout: int = timeout_cfg.get("short", 5000)
        self.medium_timeout: int = timeout_cfg.get("medium", 15000)
        self.long_timeout: int = timeout_cfg.get("long", 60000)
        self.processing_timeout: int = timeout_cfg.get("processing", 30000)

    # ========== 基础导航方法 ==========

    def open(self, url: str, wait_until: str = "domcontentloaded") -> None:
        """
        打开指定 URL 页面。

        页面是否“可用”由调用方紧接着等待的 UIMarker 决定，这里只等文档加载。

        :param url: 目标地址，可以是完整 URL，也可以是相对路径（依赖 base_url）
        :param wait_until: 等待页面加载完成的条件（load/domcontentloaded）
        """
        logger.info(f"[导航] 打开页面: {url}")
        self.page.goto(url, wait_until=wait_until, timeout=self.long_timeout)

    # ========== 同步等待 ==========

    def wait_for(
        self, marker: UIMarker, timeout: int | None = None, operation: str | None = None
    ) -> int:
        """
        等待标记成立（后置条件）。

        :param marker: 要等待的 UIMarker
        :param timeout: 超时时间（毫秒），未传则使用默认中等时长
        :param operation: 操作名，未传则使用 "页面类名.wait_for"
        :return: 实际等待时长（毫秒）
        """
        return wait_for_marker(
            self.page,
            marker,
            timeout or self.medium_timeout,
            operation or f"{type(self).__name__}.wait_for",
        )

    def is_present(self, marker: UIMarker, timeout: int | None = None) -> bool:
        """
        判断标记当前是否成立（带短暂等待）。

        :param timeout: 超时时间（毫秒），未传则使用默认短时长
        :return: True 表示成立，False 表示超时未成立
        """
        return is_marker_present(self.page, marker, timeout or self.short_timeout)

    def wait_network_idle(self, timeout: int | None = None) -> bool:
        """
        等待网络空闲。

        只作为辅助信号记录日志，不作为任何操作的完成条件，超时不会失败。

        :return: True 表示在上限内进入空闲
        """
        effective_timeout = timeout or self.short_timeout
        try:
            self.page.wait_for_load_state("networkidle", timeout=effective_timeout)
            return True
        except PlaywrightTimeoutError:
            logger.warning(f"[辅助信号] {effective_timeout}ms 内网络未空闲，继续以 UI 标记为准")
            return False

    # ========== 元素操作封装 ==========

    def ensure_actionable(
        self, locator: Locator, control: str, timeout: int | None = None
    ) -> Locator:
        """
        前置检查：控件可见且可用。

        :param locator: 控件 Locator
        :param control: 控件名（出现在错误信息中）
        :param timeout: 超时时间（毫秒），未传则使用默认短时长
        :raises PreconditionError: 超时仍不可见 / 不可用
        """
        effective_timeout = timeout or self.short_timeout
        start = time.monotonic()
        for state, check in (
            ("visible", lambda remaining: expect(locator).to_be_visible(timeout=remaining)),
            ("enabled", lambda remaining: expect(locator).to_be_enabled(timeout=remaining)),
        ):
            remaining = max(effective_timeout - int((time.monotonic() - start) * 1000), 1)
            try:
                check(remaining)
            except AssertionError as e:
                logger.error(f"[前置条件失败] 控件 '{control}' 未达到状态 {state}")
                raise PreconditionError(control, state, effective_timeout) from e
        return locator

    def click(self, locator: Locator, control: str, timeout: int | None = None) -> None:
        """
        点击控件（先做前置检查）。

        :param locator: 控件 Locator
        :param control: 控件名
        :param timeout: 前置检查的超时时间（毫秒）
        """
        self.ensure_actionable(locator, control, timeout)
        logger.info(f"[操作] 点击: {control}")
        locator.click()

    def fill(
        self, locator: Locator, control: str, value: str, timeout: int | None = None, secret: bool = False
    ) -> None:
        """
        在输入框中输入文本（会先清空原有内容）。

        :param secret: 为 True 时日志中不打印输入值（密码）
        """
        self.ensure_actionable(locator, control, timeout)
        logger.info(f"[操作] 输入文本: {control}, value={'******' if secret else value}")
        locator.fill(value)

    def set_files(self, locator: Locator, control: str, file_path: str) -> None:
        """给 file input 设置文件（input 本身通常不可见，只要求已挂载）。"""
        try:
            expect(locator).to_be_attached(timeout=self.short_timeout)
        except AssertionError as e:
            raise PreconditionError(control, "attached", self.short_timeout) from e
        logger.info(f"[操作] 设置上传文件: {control}, file={file_path}")
        locator.set_input_files(file_path)
