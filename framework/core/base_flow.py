# framework/core/base_flow.py
# -*- coding: utf-8 -*-
"""
base_flow.py
------------
业务流程（Flow）基类。

设计目的：
1. 为所有 Flow 提供统一的结构和基础能力；
2. 每个步骤用 step() 包起来：记录日志，并在失败时带上“哪个场景、哪一步”；
3. 让具体的 Flow（例如 AuthFlow / AnalysisFlow）专注于业务步骤本身。

Flow 按用例实例化，只持有本用例的 page 和页面对象，用例之间不共享可变状态。
"""

import time
from contextlib import contextmanager
from typing import Iterator

from playwright.sync_api import Page

from framework.core.errors import ScenarioStepError
from framework.core.logger import get_logger

logger = get_logger()


class BaseFlow:
    """
    Flow 层基类。

    属性：
        page: Playwright Page 实例，用于在浏览器中执行页面操作；
        scenario: 场景名，默认是类名，出现在失败信息中。
    """

    def __init__(self, page: Page):
        """
        :param page: pytest fixture 提供的 Page 实例
        """
        self.page = page
        self.scenario = type(self).__name__

    @contextmanager
    def step(self, description: str) -> Iterator[None]:
        """
        Flow 中的“步骤”。

        用法示例：
            with self.step("打开登录页面"):
                self.landing_page.open_landing(base_url)

        步骤内任何异常都会转成 ScenarioStepError（原异常挂在 __cause__ 上），
        场景立即中止，不会继续执行后面的步骤。
        嵌套调用其他 Flow 时，内层已经包装过的 ScenarioStepError 原样抛出。
        """
        logger.info(f"[Flow Step] {self.scenario}: {description}")
        start = time.monotonic()
        try:
            yield
        except ScenarioStepError:
            raise
        except Exception as e:  # noqa: BLE001
            elapsed = int((time.monotonic() - start) * 1000)
            logger.error(
                f"[Flow Step 失败] {self.scenario}: {description}（{elapsed}ms）: {e}"
            )
            raise ScenarioStepError(self.scenario, description, e) from e
        logger.debug(
            f"[Flow Step 完成] {self.scenario}: {description}"
            f"（{int((time.monotonic() - start) * 1000)}ms）"
        )
