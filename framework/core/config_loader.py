# -*- coding: utf-8 -*-
"""
config_loader.py
----------------
测试进程内唯一的配置来源。

加载顺序（后者覆盖前者）：
1. configs/config.yaml；
2. configs/config_<env>.yaml，env 取 UI_AUTOMATION_ENV，未设置时取 config.yaml 里的 env；
3. _ENV_OVERRIDES 表中的环境变量（CI 注入地址、账号、浏览器等）。

结果用 lru_cache 缓存，一次测试进程只读一次文件；用例不应修改返回的字典。
"""

import os
from functools import lru_cache
from typing import Any, Dict, Mapping, Tuple

import yaml

# 环境变量 -> 配置路径 的覆盖表
# 同一路径出现多次时，排在后面的环境变量优先
_ENV_OVERRIDES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("BASE_URL", ("app", "base_url")),
    ("UI_APP_MODE", ("app", "mode")),
    ("UI_ACCOUNT_USERNAME", ("account", "username")),
    ("UI_ACCOUNT_PASSWORD", ("account", "password")),
    ("LOGIN_USER", ("account", "username")),
    ("LOGIN_PASSWORD", ("account", "password")),
    ("UI_BROWSER", ("browser", "type")),
    ("UI_HEADLESS", ("browser", "headless")),
    ("UI_RECORD_VIDEO", ("report", "record_video")),
    ("UI_RECORD_HAR", ("report", "record_har")),
    ("UI_LOG_LEVEL", ("report", "log_level")),
)

_BOOL_VALUES = {"true": True, "1": True, "yes": True, "false": False, "0": False, "no": False}

DEFAULT_ENV = "default"


def get_project_root() -> str:
    """项目根目录（当前文件 -> framework/core -> 项目根）。"""
    return os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _config_path(env_name: str = DEFAULT_ENV) -> str:
    file_name = "config.yaml" if env_name == DEFAULT_ENV else f"config_{env_name}.yaml"
    return os.path.join(get_project_root(), "configs", file_name)


def _read_yaml(path: str) -> Dict[str, Any]:
    """
    读取一个 YAML 配置文件，空文件当作空字典。

    :raises FileNotFoundError: 文件不存在
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"配置文件不存在: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@lru_cache(maxsize=1)
def get_config() -> Dict[str, Any]:
    """
    返回合并后的配置字典（缓存）。

    环境专属文件不存在时只记用默认配置，不报错；
    环境文件里的 env 字段不会覆盖外部指定的环境名。
    """
    config = _read_yaml(_config_path())
    env_name = os.getenv("UI_AUTOMATION_ENV") or config.get("env") or DEFAULT_ENV

    if env_name != DEFAULT_ENV and os.path.isfile(_config_path(env_name)):
        config = _merge_dicts(config, _read_yaml(_config_path(env_name)))
    config["env"] = env_name

    return _apply_env_overrides(config, os.environ)


def get_app_url() -> str:
    """
    被测应用的入口地址。

    app.mode 为 demo 时返回 app.demo_url（内置演示应用，经路由拦截提供），
    否则返回 app.base_url。
    """
    app_cfg = get_config().get("app", {})
    if app_cfg.get("mode", "live") == "demo":
        return app_cfg.get("demo_url", "")
    return app_cfg.get("base_url", "")


def reload_config() -> Dict[str, Any]:
    """清空缓存并重新加载配置（主要给单元测试使用）。"""
    get_config.cache_clear()
    return get_config()


def _apply_env_overrides(config: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    按 _ENV_OVERRIDES 表把环境变量写入配置，返回新字典。

    原值是布尔的配置项按 true/false/1/0/yes/no 解析，其他值原样写入字符串。
    空字符串视为未设置。
    """
    result = _merge_dicts(config, {})
    for env_key, path in _ENV_OVERRIDES:
        raw = environ.get(env_key)
        if not raw:
            continue

        section = result
        for key in path[:-1]:
            existing = section.get(key)
            section[key] = dict(existing) if isinstance(existing, dict) else {}
            section = section[key]

        leaf = path[-1]
        if isinstance(section.get(leaf), bool):
            value = _BOOL_VALUES.get(raw.strip().lower())
            if value is None:
                raise ValueError(f"环境变量 {env_key} 需要布尔值，实际为: {raw}")
            section[leaf] = value
        else:
            section[leaf] = raw
    return result


def _merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """深度合并：两边都是字典的键递归合并，其余以 override 为准。不修改入参。"""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge_dicts(current, value)
        else:
            merged[key] = value
    return merged
