"""配置管理模块

负责加载和管理YAML配置文件，支持：
1. 默认配置（default.yaml）
2. 用户配置（config.yaml）覆盖默认配置
3. 命令行参数覆盖配置文件

配置优先级：命令行 > 用户配置 > 默认配置
"""

import copy
import os
from typing import Dict, Any, Optional
import yaml
from logger import setup_logger

logger = setup_logger(__name__)

# 常用配置常量
DEFAULT_REQUEST_TIMEOUT = 10  # 默认请求超时（秒）
DEFAULT_THREADS = 5           # 默认并发数
DEFAULT_RETRY_COUNT = 2       # 默认重试次数
DEFAULT_RETRY_DELAY = 1       # 默认重试延迟（秒）
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# 内置默认配置（最低优先级，配置文件缺失时使用）
DEFAULT_CONFIG = {
    "themes_url": "http://127.0.0.1:8000/",
    "index_url": "index.html",
    "save_folder": "output",
    "crawl": {
        "threads": DEFAULT_THREADS,
        "timeout": DEFAULT_REQUEST_TIMEOUT,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "proxy": {
        "enable": False,
        "url": "",
    },
    "error_handling": {
        "retry_count": DEFAULT_RETRY_COUNT,
        "retry_delay": DEFAULT_RETRY_DELAY,
        "exponential_backoff": True,
        "retryable_errors": [429, 500, 502, 503, 504],
    },
    "logging": {
        "level": "INFO",
        "file": "logs/mirrorthesite.log",
        "max_bytes": 10485760,
        "backup_count": 5,
    },
}

# 配置文件路径
CONFIG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "config")
DEFAULT_CONFIG_FILE = os.path.join(CONFIG_DIR, "default.yaml")
USER_CONFIG_FILE = os.path.join(CONFIG_DIR, "config.yaml")


def _read_yaml(path: str) -> Dict[str, Any]:
    """读取单个YAML文件，文件不存在或为空时返回空字典"""
    if not os.path.exists(path):
        logger.debug(f"配置文件不存在: {path}")
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (IOError, OSError, yaml.YAMLError) as e:
        logger.error(f"加载配置文件失败: {path}, 错误: {e}")
        return {}
    if not isinstance(data, dict):
        return {}
    logger.debug(f"已加载配置文件: {path}")
    return data


def load_config(config_file: Optional[str] = None) -> Dict[str, Any]:
    """加载配置文件

    Args:
        config_file: 额外的用户配置文件路径，默认使用 config/config.yaml

    Returns:
        dict: 合并后的配置
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config = merge_configs(config, _read_yaml(DEFAULT_CONFIG_FILE))
    config = merge_configs(config, _read_yaml(config_file or USER_CONFIG_FILE))

    validate_config(config)
    return config


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """合并配置

    Args:
        base: 基础配置
        override: 覆盖配置

    Returns:
        dict: 合并后的配置
    """
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            base[key] = merge_configs(base[key], value)
        else:
            base[key] = value
    return base


def validate_config(config: Dict[str, Any]) -> None:
    """验证配置

    Args:
        config: 配置字典
    """
    required_fields = ["themes_url", "index_url", "save_folder"]
    for field in required_fields:
        if not config.get(field):
            logger.warning(f"配置缺少必填项: {field}")

    crawl_config = config.setdefault("crawl", {})
    threads = crawl_config.get("threads", DEFAULT_THREADS)
    if not isinstance(threads, int) or threads < 1:
        logger.warning(f"threads 必须为正整数，当前值 {threads!r}，设置为 1")
        crawl_config["threads"] = 1

    proxy_config = config.setdefault("proxy", {})
    if proxy_config.get("enable") and not proxy_config.get("url"):
        logger.warning("已启用代理但未配置代理地址，将直接请求")
