# flows/analysis_flow.py
# -*- coding: utf-8 -*-
"""
analysis_flow.py
----------------
上传转录文件并分析的业务流程（Flow 层）。

前提：当前 page 已处于登录后的首页（由 logged_in_page fixture 或 AuthFlow.login 保证）。
"""

from playwright.sync_api import Page

from framework.core.base_flow import BaseFlow
from framework.core.logger import get_logger
from pages.analysis_page import AnalysisPage

logger = get_logger()


class AnalysisFlow(BaseFlow):
    """上传 -> 选项目 -> 选目的地 -> 分析 -> 校验结果。"""

    def __init__(self, page: Page):
        super().__init__(page)
        self.analysis_page = AnalysisPage(page)

    def upload_and_analyze(
        self, file_name: str, processing_timeout: int | None = None
    ) -> None:
        """
        完整的分析流程。

        步骤严格串行：只有项目和目的地都选完，才会去点“Analyze Now”。

        :param file_name: assets 目录下的文件名
        :param processing_timeout: 等待分析完成 / 结果出现的上限（毫秒），默认取配置
        """
        logger.info(f"[流程] 上传并分析文件: {file_name}")

        with self.step(f"上传文件 {file_name}"):
            self.analysis_page.upload_transcript(file_name)

        with self.step("选择项目"):
            self.analysis_page.choose_project()

        with self.step("选择目的地（Space / Folder / List）"):
            self.analysis_page.choose_destination()

        with self.step("点击 Analyze Now 并等待处理结束"):
            self.analysis_page.click_analyze_now(timeout=processing_timeout)

        with self.step(f"校验 {file_name} 出现在 Uploaded Files 中"):
            self.analysis_page.verify_file_under_uploaded_files(
                file_name, timeout=processing_timeout
            )

    def verify_analyze_blocked(self) -> None:
        """没有完成前置步骤时，分析按钮不可用并有提示。"""
        with self.step("校验 Analyze Now 不可用"):
            self.analysis_page.verify_analyze_blocked()
