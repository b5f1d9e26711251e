# -*- coding: utf-8 -*-
"""
errors.py
---------
框架内统一的异常类型。

分类：
1. PreconditionError：触发控件不处于期望状态（不可见 / 不可用），立即失败；
2. MalformedBodyError：mock 接口收到无法解析的请求体，由路由引擎转成 400，不会抛给用例；
3. SyncTimeoutError：等待的 UI 标记在上限时间内没有出现；
4. ScenarioStepError：Flow 中某一步失败，带上场景名和步骤名，原始异常挂在 __cause__ 上。

真实网络故障（透传请求失败）不在这里包装，Playwright 的异常原样向上抛。
"""

from typing import Optional


class HarnessError(Exception):
    """框架异常基类。"""


class PreconditionError(HarnessError):
    """操作前置条件不满足：控件不可见或不可用。"""

    def __init__(self, control: str, expected_state: str, timeout_ms: int):
        self.control = control
        self.expected_state = expected_state
        self.timeout_ms = timeout_ms
        super().__init__(
            f"[前置条件失败] 控件 '{control}' 在 {timeout_ms}ms 内未达到状态 '{expected_state}'"
        )


class MalformedBodyError(HarnessError):
    """请求体缺失或不是合法 JSON。"""

    error_key = "invalid_request_body"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"请求体无法解析为 JSON: {reason}")


class SyncTimeoutError(HarnessError):
    """在上限时间内没有观察到期望的 UI 标记。"""

    def __init__(
        self,
        operation: str,
        marker: str,
        timeout_ms: int,
        elapsed_ms: int,
        detail: Optional[str] = None,
    ):
        self.operation = operation
        self.marker = marker
        self.timeout_ms = timeout_ms
        self.elapsed_ms = elapsed_ms
        message = (
            f"[同步超时] 操作 '{operation}' 等待标记 '{marker}'，"
            f"已等待 {elapsed_ms}ms（上限 {timeout_ms}ms）"
        )
        if detail:
            message = f"{message}：{detail}"
        super().__init__(message)


class ScenarioStepError(HarnessError):
    """场景中的某一步失败，整个场景立即中止。"""

    def __init__(self, scenario: str, step: str, cause: BaseException):
        self.scenario = scenario
        self.step = step
        self.cause = cause
        super().__init__(
            f"[场景失败] {scenario} -> 步骤 '{step}' 失败: {type(cause).__name__}: {cause}"
        )
