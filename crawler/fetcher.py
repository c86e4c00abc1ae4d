"""请求模块

对目标站点发起一次 GET 请求：
- 支持代理，代理请求失败时改为直接请求
- 非 200 状态码作为结果返回，由调用方决定跳过还是中止
- 提供原始字节和解析后文档两种获取方式
"""

from dataclasses import dataclass
from typing import Optional
import requests
from requests.adapters import HTTPAdapter
from bs4 import BeautifulSoup
from logger import setup_logger
from config import DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT
from utils.error_handler import ErrorHandler, MirrorError, TransportFailure, BadStatus

# 获取 logger 实例
logger = setup_logger(__name__)


def create_session(pool_size=10):
    """创建共享的 requests session，连接池大小与并发数一致"""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size, max_retries=0)
    session.mount('http://', adapter)
    session.mount('https://', adapter)
    return session


@dataclass
class FetchResponse:
    """一次请求的结果"""
    url: str
    status_code: int
    content: bytes = b''
    error: Optional[MirrorError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code == 200

    @property
    def bad_status(self) -> bool:
        return isinstance(self.error, BadStatus)

    @property
    def text(self) -> str:
        return self.content.decode('utf-8', errors='replace')

    def raise_for_error(self):
        """请求失败时抛出对应的 TransportFailure 或 BadStatus"""
        if self.error is not None:
            raise self.error


@dataclass
class FetchedDocument:
    """解析后的HTML文档及其原始响应"""
    response: FetchResponse
    soup: BeautifulSoup


class Fetcher:
    """站点请求器"""

    def __init__(self, user_agent=DEFAULT_USER_AGENT, timeout=DEFAULT_REQUEST_TIMEOUT,
                 proxy_url=None, error_handler=None, session=None):
        """初始化请求器

        Args:
            user_agent: 请求使用的 User-Agent
            timeout: 请求超时（秒）
            proxy_url: 代理地址，为空时直接请求
            error_handler: 重试使用的错误处理器，默认不重试
            session: 可注入的 requests.Session（或同接口对象）
        """
        self.user_agent = user_agent
        self.timeout = timeout
        self.proxy_url = proxy_url or None
        self.error_handler = error_handler or ErrorHandler(retry_count=0)
        self.session = session if session is not None else create_session()

    @classmethod
    def from_config(cls, config, session=None):
        """根据配置字典创建请求器"""
        crawl_config = config.get('crawl', {})
        proxy_config = config.get('proxy', {})
        proxy_url = proxy_config.get('url') if proxy_config.get('enable') else None
        pool_size = crawl_config.get('threads', 5)
        return cls(
            user_agent=crawl_config.get('user_agent', DEFAULT_USER_AGENT),
            timeout=crawl_config.get('timeout', DEFAULT_REQUEST_TIMEOUT),
            proxy_url=proxy_url,
            error_handler=ErrorHandler.from_config(config.get('error_handling')),
            session=session if session is not None else create_session(pool_size),
        )

    def _request(self, url, proxies=None):
        headers = {'User-Agent': self.user_agent}
        return self.session.get(url, headers=headers, timeout=self.timeout, proxies=proxies)

    def _get(self, url):
        """发送请求，代理模式下代理失败则直接请求

        Raises:
            TransportFailure: 直接请求也失败
        """
        if self.proxy_url:
            proxies = {'http': self.proxy_url, 'https': self.proxy_url}
            try:
                return self._request(url, proxies)
            except requests.RequestException as e:
                logger.error(f"代理请求失败，改为直接请求: {url}, 错误: {e}")

        try:
            return self._request(url)
        except requests.RequestException as e:
            raise TransportFailure(url, e) from e

    def fetch(self, url) -> FetchResponse:
        """获取 URL 的内容

        Args:
            url: 完整的远程地址

        Returns:
            FetchResponse: 成功时 status_code 为 200；状态码错误时 error 为 BadStatus；
            传输失败时 status_code 为 0，error 为 TransportFailure
        """
        @self.error_handler.retry
        def _do_request():
            response = self._get(url)
            if response.status_code != 200:
                raise BadStatus(url, response.status_code)
            return response

        try:
            response = _do_request()
        except BadStatus as e:
            logger.warning(f"状态码错误: {e.status_code} {url}")
            return FetchResponse(url, e.status_code, error=e)
        except TransportFailure as e:
            logger.error(f"请求失败: {url}, 错误: {e.cause}")
            return FetchResponse(url, 0, error=e)

        logger.debug(f"请求成功: {url} ({len(response.content)} 字节)")
        return FetchResponse(url, response.status_code, response.content)

    def fetch_bytes(self, url) -> bytes:
        """获取原始字节，用于原样保存图片、脚本和样式表

        Raises:
            TransportFailure: 请求失败
            BadStatus: 状态码不是 200
        """
        result = self.fetch(url)
        result.raise_for_error()
        return result.content

    def fetch_document(self, url) -> FetchedDocument:
        """获取并解析HTML文档

        Raises:
            TransportFailure: 请求失败
            BadStatus: 状态码不是 200
        """
        result = self.fetch(url)
        result.raise_for_error()
        soup = BeautifulSoup(result.content, 'html.parser')
        return FetchedDocument(result, soup)
