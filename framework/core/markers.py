# -*- coding: utf-8 -*-
"""
markers.py
----------
UI 标记（UIMarker）：页面上一个有名字、可观察、可等待的状态，作为同步屏障。

每个会引起页面状态变化的操作，都要有一个对应的标记可以等待，
不允许假设状态切换是瞬间完成的，也不允许用固定 sleep 代替。
等待基于 Playwright 的 expect（自带轮询重试），超时后抛出 SyncTimeoutError，
错误信息里带上操作名、标记名、上限和实际等待时长。
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict

from playwright.sync_api import Locator, LocatorAssertions, Page, expect

from framework.core.errors import SyncTimeoutError
from framework.core.logger import get_logger

logger = get_logger()

VISIBLE = "visible"
HIDDEN = "hidden"
ENABLED = "enabled"
DISABLED = "disabled"
ATTACHED = "attached"

_EXPECTATIONS: Dict[str, Callable[[LocatorAssertions, int], None]] = {
    VISIBLE: lambda assertion, timeout: assertion.to_be_visible(timeout=timeout),
    HIDDEN: lambda assertion, timeout: assertion.to_be_hidden(timeout=timeout),
    ENABLED: lambda assertion, timeout: assertion.to_be_enabled(timeout=timeout),
    DISABLED: lambda assertion, timeout: assertion.to_be_disabled(timeout=timeout),
    ATTACHED: lambda assertion, timeout: assertion.to_be_attached(timeout=timeout),
}


@dataclass(frozen=True)
class UIMarker:
    """
    UI 标记。

    属性：
        name:   标记名，出现在日志和超时错误中，例如 "dashboard heading visible"；
        locate: page -> Locator，延迟到等待时才定位；
        state:  期望状态，visible / hidden / enabled / disabled / attached。
    """

    name: str
    locate: Callable[[Page], Locator]
    state: str = VISIBLE

    def __post_init__(self):
        if self.state not in _EXPECTATIONS:
            raise ValueError(f"不支持的标记状态: {self.state}")

    def with_state(self, state: str, name: str | None = None) -> "UIMarker":
        """同一个元素的另一种状态，例如按钮从 enabled 变成 disabled。"""
        return UIMarker(name=name or f"{self.name} -> {state}", locate=self.locate, state=state)


def wait_for_marker(page: Page, marker: UIMarker, timeout: int, operation: str) -> int:
    """
    阻塞直到标记成立，或超过 timeout。

    :param page: 当前用例的 Page
    :param marker: 要等待的标记
    :param timeout: 上限（毫秒），必须为正数
    :param operation: 发起等待的操作名，用于错误信息
    :return: 实际等待时长（毫秒）
    :raises SyncTimeoutError: 超时未观察到标记
    """
    if timeout <= 0:
        raise ValueError(f"等待上限必须为正数: {timeout}")

    logger.info(f"[同步] {operation}: 等待标记 '{marker.name}'（上限 {timeout}ms）")
    start = time.monotonic()
    try:
        _EXPECTATIONS[marker.state](expect(marker.locate(page)), timeout)
    except AssertionError as e:
        elapsed = int((time.monotonic() - start) * 1000)
        logger.error(
            f"[同步超时] {operation}: 标记 '{marker.name}' 未出现，已等待 {elapsed}ms"
        )
        detail = str(e).strip().splitlines()[0] if str(e).strip() else None
        raise SyncTimeoutError(operation, marker.name, timeout, elapsed, detail) from e

    elapsed = int((time.monotonic() - start) * 1000)
    logger.info(f"[同步] {operation}: 标记 '{marker.name}' 已成立（{elapsed}ms）")
    return elapsed


def is_marker_present(page: Page, marker: UIMarker, timeout: int) -> bool:
    """
    探测标记是否在 timeout 内成立，不抛异常。

    只用于“检查状态”的场景（例如用例断言前的状态查询），不能替代操作后的同步等待。
    """
    try:
        _EXPECTATIONS[marker.state](expect(marker.locate(page)), timeout)
        return True
    except AssertionError:
        logger.warning(f"[校验] 标记 '{marker.name}' 在 {timeout}ms 内未成立")
        return False
