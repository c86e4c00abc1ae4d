# Utils 模块
"""
工具模块，提供错误处理和并发控制等辅助功能。
"""

__version__ = "0.1.0"

from .error_handler import (
    ErrorHandler,
    MirrorError,
    TransportFailure,
    BadStatus,
    LocalIOFailure,
    MalformedReference,
    CrawlAborted,
)
from .slot_pool import SlotPool

__all__ = [
    "ErrorHandler",
    "MirrorError",
    "TransportFailure",
    "BadStatus",
    "LocalIOFailure",
    "MalformedReference",
    "CrawlAborted",
    "SlotPool",
]
