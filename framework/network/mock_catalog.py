# -*- coding: utf-8 -*-
"""
mock_catalog.py
---------------
被测前端依赖的后端接口 mock 目录。

每个逻辑资源一个注册函数，把 RoutePattern + resolver 注册到路由拦截引擎：
- 登录接口：账号密码完全匹配返回固定 token，其余一律 401；只处理 POST；
- 列表 / 设置类接口：只处理 GET，返回合法但为空的数据，保证首页首屏渲染不报错；
  其他方法不处理（透传），方便个别用例走真实后端的写接口。

所有 resolver 都是请求内容 + 固定配置的纯函数，不在调用之间保存状态。
"""

import copy
from typing import Any, Dict, Iterable, Optional

from framework.core.accounts import Account, get_default_account
from framework.core.config_loader import get_config
from framework.core.logger import get_logger
from framework.network.route_engine import (
    InterceptedRequest,
    MockResponse,
    MockRule,
    Resolver,
    RouteInterceptionEngine,
    RoutePattern,
)

logger = get_logger()

DEFAULT_API_BASE = "**/api"
DEFAULT_TOKEN = "mock-jwt-token-for-ci-testing"

# 资源路径（相对 api_base） -> GET 返回的默认数据
RESOURCE_DEFAULTS: Dict[str, Any] = {
    "projects": [],
    "meetings": [],
    "tasks": [],
    "logs": [],
    "history": [],
    "recordings": [],
    "settings/clickup": {"api_token": "", "workspace_id": "", "list_id": ""},
    "settings/projects": [],
    "knowledge-base/documents": [],
}


def _mock_config() -> Dict[str, Any]:
    return get_config().get("mock", {})


def _api_url(resource: str, api_base: Optional[str] = None) -> str:
    base = (api_base or _mock_config().get("api_base") or DEFAULT_API_BASE).rstrip("/")
    return f"{base}/{resource.strip('/')}"


# ========== resolver 工厂 ==========


def make_auth_resolver(account: Account, token: str) -> Resolver:
    """
    登录接口 resolver。

    - 请求体不是合法 JSON：request.json() 抛 MalformedBodyError，由引擎转成 400；
    - 用户名、密码与 account 完全相等：200 {"token": token}；
    - 其他情况（字段缺失、类型不对、账号密码错误）：401。
    """

    def resolve(request: InterceptedRequest) -> MockResponse:
        body = request.json()
        if (
            isinstance(body, dict)
            and body.get("username") == account.username
            and body.get("password") == account.password
        ):
            return MockResponse.json({"token": token})
        return MockResponse.error(401, "invalid_credentials", "Invalid username or password")

    return resolve


def make_resource_resolver(
    payload: Any, token: Optional[str] = None
) -> Resolver:
    """
    列表 / 设置类接口 resolver。

    :param payload: GET 返回的默认数据（每次返回深拷贝，用例改了也不影响下一次）
    :param token: 不为 None 时要求 Authorization: Bearer <token>，否则返回 401
    """

    def resolve(request: InterceptedRequest) -> Optional[MockResponse]:
        if request.method != "GET":
            return None
        if token is not None and request.header("authorization") != f"Bearer {token}":
            return MockResponse.error(401, "missing_or_invalid_token")
        return MockResponse.json(copy.deepcopy(payload))

    return resolve


# ========== 注册函数 ==========


def register_auth_mock(
    engine: RouteInterceptionEngine,
    account: Optional[Account] = None,
    token: Optional[str] = None,
    api_base: Optional[str] = None,
) -> MockRule:
    """注册 POST /api/auth/login。"""
    account = account or get_default_account()
    token = token or _mock_config().get("token") or DEFAULT_TOKEN
    return engine.intercept(
        RoutePattern(url=_api_url("auth/login", api_base), method="POST"),
        make_auth_resolver(account, token),
        name="auth/login",
    )


def register_resource_mock(
    engine: RouteInterceptionEngine,
    resource: str,
    payload: Any = None,
    api_base: Optional[str] = None,
) -> MockRule:
    """
    注册单个资源的 GET mock。

    :param resource: 例如 "projects"、"settings/clickup"
    :param payload: 不传时使用 RESOURCE_DEFAULTS 中的默认值
    """
    if payload is None:
        if resource not in RESOURCE_DEFAULTS:
            raise KeyError(f"未知资源 {resource}，请显式传入 payload")
        payload = RESOURCE_DEFAULTS[resource]

    mock_cfg = _mock_config()
    token = None
    if mock_cfg.get("enforce_token"):
        token = mock_cfg.get("token") or DEFAULT_TOKEN

    # 方法过滤放在 resolver 里：非 GET 也会记入台账，便于断言“被透传”
    return engine.intercept(
        RoutePattern(url=_api_url(resource, api_base)),
        make_resource_resolver(payload, token),
        name=resource,
    )


def register_resource_mocks(
    engine: RouteInterceptionEngine,
    resources: Optional[Iterable[str]] = None,
    api_base: Optional[str] = None,
) -> None:
    """注册首页初始化时会请求的所有资源接口。"""
    for resource in resources or RESOURCE_DEFAULTS:
        register_resource_mock(engine, resource, api_base=api_base)


def register_all_mocks(
    engine: RouteInterceptionEngine, account: Optional[Account] = None
) -> None:
    """登录 + 首页所需的全部 mock，一般在用例开始导航之前调用。"""
    logger.info("[Mock] 注册全部后端接口 mock（登录 + 首页资源）")
    register_auth_mock(engine, account=account)
    register_resource_mocks(engine)
