# -*- coding: utf-8 -*-
"""
accounts.py
-----------
测试账号数据。

默认账号优先级：
1. 环境变量 LOGIN_USER / LOGIN_PASSWORD（或 UI_ACCOUNT_USERNAME / UI_ACCOUNT_PASSWORD）；
2. configs/config.yaml 中 account 节点（环境变量已由 config_loader 合并进去）。
"""

from dataclasses import dataclass

from framework.core.config_loader import get_config


@dataclass(frozen=True)
class Account:
    username: str
    password: str


# 负向用例使用的固定错误账号
INVALID_ACCOUNT = Account(username="invalidUser", password="wrongPassword")


def get_default_account() -> Account:
    """
    获取默认登录账号。

    :raises ValueError: 用户名或密码没有配置
    """
    account_cfg = get_config().get("account", {})
    username = account_cfg.get("username")
    password = account_cfg.get("password")

    if not username or password is None or password == "":
        raise ValueError(
            "默认登录账号未配置，请设置环境变量 LOGIN_USER / LOGIN_PASSWORD "
            "或在配置文件 account 下配置用户名和密码。"
        )

    # YAML 中 0000 这类值可能被写成数字，统一转成字符串
    return Account(username=str(username), password=str(password))
