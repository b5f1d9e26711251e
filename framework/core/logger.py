# -*- coding: utf-8 -*-
"""
logger.py
---------
全框架共用一个 loguru logger，第一次调用 get_logger() 时按配置装好输出：

- 控制台：级别取 report.log_level（环境变量 UI_LOG_LEVEL 可覆盖），默认 INFO；
- 文件：report.log_dir 下按天一个文件，固定 DEBUG 级别，
  mock 命中、标记等待耗时等细节只在文件里。
"""

import os
import sys
from functools import lru_cache

from loguru import logger

from framework.core.config_loader import get_config

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <7}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


@lru_cache(maxsize=1)
def get_logger():
    """返回已配置好的 loguru logger（只初始化一次，不会重复添加 sink）。"""
    report_cfg = get_config().get("report", {})
    log_dir = report_cfg.get("log_dir", "reports/logs")
    os.makedirs(log_dir, exist_ok=True)

    logger.remove()
    # pytest -n 下每个 worker 进程各自初始化
    logger.add(
        sys.stderr,
        level=str(report_cfg.get("log_level", "INFO")).upper(),
        format=CONSOLE_FORMAT,
        enqueue=True,
    )
    logger.add(
        os.path.join(log_dir, "e2e_harness_{time:YYYYMMDD}.log"),
        level="DEBUG",
        rotation="00:00",
        retention="10 days",
        encoding="utf-8",
        enqueue=True,
    )
    return logger
