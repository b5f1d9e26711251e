# pages/analysis_page.py
# -*- coding: utf-8 -*-
"""
analysis_page.py
----------------
首页上“上传转录文件 -> 选择项目 -> 选择目的地 -> 开始分析”区域的 Page Object。

两个需要显式同步的状态机：
1. “Analyze Now” 按钮：Disabled -> Enabled -> Busy(Analyzing...) -> Enabled；
   点击前必须等到可用，点击后等到 Busy（或已经恢复），再等 Busy 消失，超时即失败；
2. 目的地级联下拉：选了 Space 才解锁 Folder / List，
   每个下拉必须等到可用、选项加载出来之后才能选，不能假设同步可用。
"""

import re

from playwright.sync_api import Locator, Page

from framework.core.base_page import BasePage
from framework.core.markers import DISABLED, ENABLED, HIDDEN, UIMarker
from utils.path_utils import get_asset_path


UPLOAD_TRIGGER_TEXT = "Upload Transcript File"
CHOOSE_PROJECT_TEXT = "Choose Project"
CHOOSE_DESTINATION_TEXT = "Choose Destination"

UPLOAD_DIALOG = UIMarker(
    name="upload dialog visible",
    locate=lambda page: page.get_by_role("dialog", name=re.compile(r"upload transcript file", re.I)),
)
CONFIRM_SELECTION = UIMarker(
    name="confirm-selection button visible",
    locate=lambda page: page.get_by_role("button", name=re.compile(r"confirm selection", re.I)),
)
SELECTION_DIALOG_CLOSED = CONFIRM_SELECTION.with_state(HIDDEN, name="selection dialog closed")
OPTION_LIST_CLOSED = UIMarker(
    name="option list closed",
    locate=lambda page: page.get_by_role("option").first,
    state=HIDDEN,
)
ANALYZE_ENABLED = UIMarker(
    name="analyze button enabled",
    locate=lambda page: page.get_by_role("button", name=re.compile(r"analyze now", re.I)),
    state=ENABLED,
)
ANALYZE_DISABLED = ANALYZE_ENABLED.with_state(DISABLED, name="analyze button disabled")
ANALYZE_BUSY = UIMarker(
    name="analyze button busy",
    locate=lambda page: page.get_by_role("button", name=re.compile(r"analyzing", re.I)),
    state=DISABLED,
)
ANALYZE_BUSY_CLEARED = ANALYZE_BUSY.with_state(HIDDEN, name="analyze busy cleared")
# 后端很快时 Busy 可能在第一次轮询前就已结束，按钮已恢复可用也算点击生效
ANALYZE_STARTED = UIMarker(
    name="analyze button busy or already settled",
    locate=lambda page: page.get_by_role("button", name=re.compile(r"analyzing", re.I)).or_(
        page.get_by_role("button", name=re.compile(r"analyze now", re.I), disabled=False)
    ),
)
INCOMPLETE_STEPS_HINT = UIMarker(
    name="complete-all-steps hint visible",
    locate=lambda page: page.get_by_text(re.compile(r"complete all steps above", re.I)),
)
UPLOADED_FILES_SECTION = UIMarker(
    name="uploaded-files section visible",
    locate=lambda page: page.get_by_role(
        "heading", name=re.compile(r"uploaded files", re.I)
    ).locator('xpath=ancestor::div[contains(@class,"shadow-sm")][1]'),
)


def _nth_option(index: int) -> UIMarker:
    return UIMarker(
        name=f"option #{index} visible",
        locate=lambda page: page.get_by_role("option").nth(index),
    )


class AnalysisPage(BasePage):
    """分析流程区域。"""

    # ========== 内部 Locator 获取方法 ==========

    def _space_dropdown(self) -> Locator:
        return self.page.get_by_label(re.compile(r"space", re.I))

    def _folder_dropdown(self) -> Locator:
        return self.page.get_by_role("combobox", name=re.compile(r"folder \(optional\)", re.I))

    def _list_dropdown(self) -> Locator:
        return self.page.get_by_label(re.compile(r"list", re.I))

    def _analyze_button(self) -> Locator:
        return ANALYZE_ENABLED.locate(self.page)

    # ========== 上传 ==========

    def upload_transcript(self, file_name: str) -> None:
        """
        通过弹窗上传 assets 目录下的文件，等待文件名出现在页面上。

        :param file_name: assets 目录下的文件名，例如 transcript-file.txt
        """
        file_path = get_asset_path(file_name)

        self.click(self.page.get_by_text(UPLOAD_TRIGGER_TEXT, exact=True), "Upload Transcript File")
        self.wait_for(UPLOAD_DIALOG, operation="upload-file-via-modal")

        dialog = UPLOAD_DIALOG.locate(self.page)
        self.set_files(dialog.locator('input[type="file"]'), "transcript file input", file_path)

        uploaded = UIMarker(
            name=f"file name '{file_name}' visible",
            locate=lambda page: page.get_by_text(file_name).first,
        )
        self.wait_for(uploaded, operation="upload-file-via-modal")

    # ========== 选择项目 ==========

    def choose_project(self) -> None:
        """打开项目选择弹窗，确认默认项目，等待弹窗关闭。"""
        self.click(self.page.get_by_text(CHOOSE_PROJECT_TEXT, exact=True), "Choose Project")
        self.wait_for(CONFIRM_SELECTION, operation="select-project")
        self.click(CONFIRM_SELECTION.locate(self.page), "Confirm Selection button")
        self.wait_for(SELECTION_DIALOG_CLOSED, operation="select-project")

    # ========== 选择目的地（级联下拉） ==========

    def choose_destination(
        self, space_index: int = 0, folder_index: int = 1, list_index: int = 0
    ) -> None:
        """
        选择目的地：Space -> Folder（可选）-> List，最后确认。

        每一级都先等下拉可用、选项加载出来再选。

        :param space_index: Space 选项序号
        :param folder_index: Folder 选项序号（第 0 项一般是“不选文件夹”）
        :param list_index: List 选项序号
        """
        operation = "select-destination"
        self.click(
            self.page.get_by_text(CHOOSE_DESTINATION_TEXT, exact=True), "Choose Destination"
        )

        self._pick_option(self._space_dropdown(), "Space dropdown", space_index, operation)
        self._pick_option(self._folder_dropdown(), "Folder dropdown", folder_index, operation)
        self._pick_option(self._list_dropdown(), "List dropdown", list_index, operation)

        self.click(CONFIRM_SELECTION.locate(self.page), "Confirm Selection button")
        self.wait_for(SELECTION_DIALOG_CLOSED, operation=operation)

    def _pick_option(self, dropdown: Locator, control: str, index: int, operation: str) -> None:
        # 依赖上一级的下拉在上一级选完后才会解锁
        self.click(dropdown, control, timeout=self.medium_timeout)
        option = _nth_option(index)
        self.wait_for(option, operation=f"{operation}: {control} options populated")
        self.click(option.locate(self.page), f"{control} option #{index}")
        self.wait_for(OPTION_LIST_CLOSED, operation=f"{operation}: {control}")

    # ========== 开始分析（长耗时按钮） ==========

    def click_analyze_now(self, timeout: int | None = None) -> None:
        """
        点击“Analyze Now”，等待 Busy 出现再消失。

        Busy 很短时可能观察不到，按钮已恢复为可用的“Analyze Now”同样视为完成。

        :param timeout: 等待 Busy 消失的上限（毫秒），未传则使用 processing 超时
        :raises PreconditionError: 前置步骤未完成，按钮在上限内没有变为可用
        :raises SyncTimeoutError: 点击后按钮既没有进入 Busy 也没有恢复，或 Busy 在上限内没有消失
        """
        operation = "trigger-long-running-action"
        self.click(self._analyze_button(), "Analyze Now button", timeout=self.medium_timeout)
        self.wait_for(ANALYZE_STARTED, operation=operation)
        self.wait_for(
            ANALYZE_BUSY_CLEARED, timeout=timeout or self.processing_timeout, operation=operation
        )

    def is_analyze_enabled(self) -> bool:
        return self.is_present(ANALYZE_ENABLED)

    def verify_analyze_blocked(self) -> None:
        """
        前置步骤未完成时：按钮保持禁用，并提示“complete all steps above”。

        :raises SyncTimeoutError: 按钮不是禁用状态，或提示没有出现
        """
        self.wait_for(ANALYZE_DISABLED, timeout=self.short_timeout, operation="verify-action-blocked")
        self.wait_for(INCOMPLETE_STEPS_HINT, operation="verify-action-blocked")

    # ========== 结果列表 ==========

    def verify_file_under_uploaded_files(self, file_name: str, timeout: int | None = None) -> None:
        """
        等待文件出现在“Uploaded Files”区域。

        :param timeout: 上限（毫秒），未传则使用 processing 超时（容忍后端处理延迟）
        """
        operation = "verify-item-appeared-in-list"
        self.wait_for(UPLOADED_FILES_SECTION, operation=operation)

        item = UIMarker(
            name=f"'{file_name}' listed under uploaded files",
            locate=lambda page: _uploaded_item(page, file_name),
        )
        self.wait_for(item, timeout=timeout or self.processing_timeout, operation=operation)


def _uploaded_item(page: Page, file_name: str) -> Locator:
    section = UPLOADED_FILES_SECTION.locate(page)
    return section.get_by_text(file_name, exact=False).first
