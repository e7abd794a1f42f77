"""
本文件用于加载项目运行配置：优先读取项目根目录的 `config.yaml`，其次为环境变量与 `.env`。
主要函数/类:
- `Settings`: 运行时配置模型（支持类型校验与默认值）
- `get_settings`: 获取配置单例（带缓存）
- `get_missing_config_keys`: 计算关键配置缺失项（用于健康检查提示）
- `load_yaml_dict`: 读取 YAML 配置文件
- `_normalize_yaml_config`: 将 YAML 配置键标准化为大写
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]
CONFIG_PATH = Path(os.environ.get("SIGNAL_CONFIG_PATH") or BASE_DIR / "config.yaml")


def load_yaml_dict(file_path: Path) -> Dict[str, Any]:
    """读取 YAML 配置文件为字典；文件不存在或为空时返回空字典。"""
    if not file_path.exists():
        return {}

    data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{file_path.name} 顶层必须为映射（key-value）结构")
    return data


def _normalize_yaml_config(data: Dict[str, Any]) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for k, v in (data or {}).items():
        if isinstance(k, str):
            normalized[k.upper()] = v
        else:
            normalized[str(k).upper()] = v
    return normalized


class Settings(BaseSettings):
    """
    输入:
    - `config.yaml`、环境变量与 `.env` 文件中的配置项

    输出:
    - 统一的运行时配置对象

    作用:
    - 集中管理项目运行所需的配置，并提供默认值与类型校验
    """

    APP_NAME: str = "Signal"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 8000

    DATABASE_URL: Optional[str] = None

    # OpenAI 兼容接口
    AI_API_KEY: Optional[str] = None
    AI_BASE_URL: Optional[str] = None
    AI_MODEL: Optional[str] = None
    AI_MAX_TOKENS: int = 4096
    AI_TEMPERATURE: float = 0.6
    AI_TIMEOUT_SECONDS: float = 120.0

    # 上游身份网关透传的用户 ID 请求头
    AUTH_USER_HEADER: str = "X-User-Id"

    AUTO_ANALYZE_ON_CREATE: bool = True
    AUTO_REFRESH_ENABLED: bool = False
    REFRESH_CHECK_INTERVAL_MINUTES: int = 30

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        def yaml_settings():
            return _normalize_yaml_config(load_yaml_dict(CONFIG_PATH))

        return (
            init_settings,
            yaml_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )


def get_missing_config_keys(settings: Settings) -> List[str]:
    required_keys = [
        "DATABASE_URL",
        "AI_API_KEY",
        "AI_MODEL",
    ]

    missing: List[str] = []
    for k in required_keys:
        v = getattr(settings, k, None)
        if v is None:
            missing.append(k)
            continue
        if isinstance(v, str) and not v.strip():
            missing.append(k)
            continue
    return missing


@lru_cache()
def get_settings() -> Settings:
    """
    输入:
    - 无

    输出:
    - `Settings` 单例实例

    作用:
    - 通过缓存避免重复解析配置文件与环境变量
    """

    return Settings()

