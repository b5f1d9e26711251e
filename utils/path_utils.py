# -*- coding: utf-8 -*-
"""
path_utils.py
-------------
路径相关工具函数，主要用于统一管理截图、trace、上传文件等路径。
"""

import os
from datetime import datetime

from framework.core.config_loader import get_config, get_project_root


def ensure_dir(path: str) -> None:
    """
    确保目录存在，如不存在则递归创建。

    :param path: 目录路径
    """
    os.makedirs(path, exist_ok=True)


def _artifact_path(dir_key: str, default_dir: str, test_name: str, suffix: str) -> str:
    report_cfg = get_config().get("report", {})
    target_dir = report_cfg.get(dir_key, default_dir)
    ensure_dir(target_dir)

    # 使用时间戳避免重名；参数化用例名里的 [] 等字符替换掉，避免文件名非法
    safe_name = "".join(c if c.isalnum() or c in "-_." else "_" for c in test_name)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    return os.path.join(target_dir, f"{safe_name}_{timestamp}{suffix}")


def get_screenshot_path(test_name: str) -> str:
    """
    根据测试用例名生成截图路径。

    :param test_name: 测试用例名称（一般来自 request.node.name）
    """
    return _artifact_path("screenshot_dir", "reports/screenshots", test_name, ".png")


def get_trace_path(test_name: str) -> str:
    """
    根据测试用例名生成 trace 文件路径（.zip）。

    :param test_name: 测试用例名称（来自 request.node.name）
    """
    return _artifact_path("trace_dir", "reports/traces", test_name, ".zip")


def get_har_path(test_name: str) -> str:
    """本用例的 HAR 文件路径（report.record_har 打开时使用）。"""
    return _artifact_path("har_dir", "reports/har", test_name, ".har")


def get_video_dir() -> str:
    report_cfg = get_config().get("report", {})
    video_dir = report_cfg.get("video_dir", "reports/videos")
    ensure_dir(video_dir)
    return video_dir


def get_asset_path(file_name: str) -> str:
    """
    解析上传用的测试文件路径。

    相对路径的 assets.dir 以项目根目录为基准。

    :param file_name: 文件名，例如 transcript-file.txt
    :return: 文件的绝对路径
    :raises FileNotFoundError: 文件不存在
    """
    assets_dir = get_config().get("assets", {}).get("dir", "tests/assets")
    if not os.path.isabs(assets_dir):
        assets_dir = os.path.join(get_project_root(), assets_dir)

    file_path = os.path.join(assets_dir, file_name)
    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"测试文件不存在: {file_path}")
    return file_path
