"""日志配置模块

提供统一的日志记录功能：
- 控制台日志：StreamHandler
- 文件日志：RotatingFileHandler，自动轮转（配置了日志文件时启用）
- 程序退出时正确释放资源
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

# 日志配置常量
DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_ENCODING = 'utf-8'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# 全局标志：是否已经初始化
_initialized = False
_root_handlers = []
_logging_config = {}


def _get_log_settings():
    """获取日志设置

    Returns:
        tuple: (log_file, log_level, max_bytes, backup_count)
    """
    config = _logging_config

    log_file = config.get('file')

    level_str = config.get('level', 'INFO')
    log_level = getattr(logging, str(level_str).upper(), DEFAULT_LOG_LEVEL)

    max_bytes = config.get('max_bytes', DEFAULT_MAX_BYTES)
    backup_count = config.get('backup_count', DEFAULT_BACKUP_COUNT)

    return log_file, log_level, max_bytes, backup_count


def _remove_root_handlers():
    root_logger = logging.getLogger()
    for handler in _root_handlers:
        root_logger.removeHandler(handler)
        try:
            handler.close()
        except (IOError, OSError):
            pass
    _root_handlers.clear()


def _ensure_root_logger_configured():
    """确保根日志记录器已配置（只执行一次）"""
    global _initialized

    if _initialized:
        return

    log_file, log_level, max_bytes, backup_count = _get_log_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # 只清除本模块添加的处理器，避免影响外部（例如测试框架）注册的处理器
    _remove_root_handlers()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # 创建文件处理器
    if log_file:
        log_file = os.path.abspath(log_file)
        try:
            os.makedirs(os.path.dirname(log_file), exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding=DEFAULT_ENCODING,
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            _root_handlers.append(file_handler)
        except (IOError, OSError) as e:
            print(f"[Logger Error] 无法创建文件处理器: {e}", file=sys.stderr, flush=True)

    # 创建控制台处理器
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    _root_handlers.append(console_handler)

    _initialized = True


def configure_logging(logging_config=None):
    """根据配置重新初始化日志

    Args:
        logging_config: 配置中的 logging 段，支持 level、file、max_bytes、backup_count
    """
    global _initialized, _logging_config

    _logging_config = dict(logging_config or {})
    _initialized = False
    _ensure_root_logger_configured()


def setup_logger(name=__name__):
    """设置并返回一个配置好的 logger 实例

    Args:
        name: logger 名称，默认使用模块名称

    Returns:
        配置好的 logger 实例
    """
    _ensure_root_logger_configured()
    return logging.getLogger(name)


def close_all_loggers():
    """关闭所有日志处理器，释放文件锁

    在程序退出前调用，确保日志文件被正确关闭
    """
    global _initialized

    for handler in _root_handlers:
        try:
            handler.flush()
        except (IOError, OSError, ValueError):
            pass
    _remove_root_handlers()
    _initialized = False


# 确保程序退出时清理日志
import atexit
atexit.register(close_all_loggers)
