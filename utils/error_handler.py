"""错误处理模块

定义镜像过程中的错误类型，并提供重试机制：
- 传输失败、状态码错误、本地IO失败、引用格式错误、抓取中止
- 自动重试传输失败和可重试的状态码
- 支持指数退避算法
"""

import time
import random
from functools import wraps
from logger import setup_logger

# 获取 logger 实例
logger = setup_logger(__name__)


class MirrorError(Exception):
    """镜像错误基类"""


class TransportFailure(MirrorError):
    """连接、DNS 或代理失败"""

    def __init__(self, url, cause=None):
        super().__init__(f"请求失败: {url}: {cause}")
        self.url = url
        self.cause = cause


class BadStatus(MirrorError):
    """响应状态码不是 200"""

    def __init__(self, url, status_code):
        super().__init__(f"状态码错误 {status_code}: {url}")
        self.url = url
        self.status_code = status_code


class LocalIOFailure(MirrorError):
    """创建目录或写文件失败"""

    def __init__(self, path, cause=None):
        super().__init__(f"写入失败: {path}: {cause}")
        self.path = path
        self.cause = cause


class MalformedReference(MirrorError):
    """无法解析的引用，静默跳过"""


class CrawlAborted(MirrorError):
    """页面级失败导致整个抓取中止"""

    def __init__(self, cause):
        super().__init__(f"抓取中止: {cause}")
        self.cause = cause


class ErrorHandler:
    """错误处理器，提供重试机制

    重试次数用尽或遇到不可重试的错误时，原样抛出最后一次的异常，由调用方决定跳过还是中止。
    """

    def __init__(self, retry_count=2, retry_delay=1, exponential_backoff=True,
                 retryable_errors=None):
        """初始化错误处理器

        Args:
            retry_count: 重试次数
            retry_delay: 重试间隔（秒）
            exponential_backoff: 是否使用指数退避
            retryable_errors: 可重试的状态码列表
        """
        self.retry_count = retry_count
        self.retry_delay = retry_delay
        self.exponential_backoff = exponential_backoff
        self.retryable_errors = retryable_errors or [429, 500, 502, 503, 504]

    @classmethod
    def from_config(cls, error_config):
        """根据配置中的 error_handling 段创建错误处理器"""
        error_config = error_config or {}
        return cls(
            retry_count=error_config.get('retry_count', 2),
            retry_delay=error_config.get('retry_delay', 1),
            exponential_backoff=error_config.get('exponential_backoff', True),
            retryable_errors=error_config.get('retryable_errors'),
        )

    def retry(self, func):
        """重试装饰器

        Args:
            func: 要装饰的函数

        Returns:
            装饰后的函数
        """
        @wraps(func)
        def wrapper(*args, **kwargs):
            retries = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except MirrorError as e:
                    if not self._is_retryable_error(e):
                        logger.debug(f"操作失败（不可重试）: {e}")
                        raise

                    retries += 1
                    if retries > self.retry_count:
                        if self.retry_count:
                            logger.error(f"达到最大重试次数 {self.retry_count}，操作失败: {e}")
                        raise

                    delay = self._calculate_delay(retries)
                    logger.warning(f"操作失败，{delay:.2f}秒后重试 ({retries}/{self.retry_count}): {e}")
                    time.sleep(delay)
        return wrapper

    def _is_retryable_error(self, error):
        """传输失败和配置中的状态码可重试"""
        if isinstance(error, BadStatus):
            return error.status_code in self.retryable_errors
        return isinstance(error, TransportFailure)

    def _calculate_delay(self, retry_count):
        """计算重试延迟时间

        Args:
            retry_count: 当前重试次数

        Returns:
            float: 延迟时间（秒）
        """
        if self.exponential_backoff:
            delay = (2 ** (retry_count - 1)) * self.retry_delay
        else:
            delay = self.retry_delay

        # 添加随机抖动，避免并发请求同时重试
        jitter = random.uniform(0.5, 1.5)
        return delay * jitter
