"""测试公共工具：伪造的 HTTP session 和抓取器工厂"""

import os
import sys
import threading
import time

import pytest
import requests

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from crawler.crawl_site import CrawlSite  # noqa: E402
from crawler.fetcher import Fetcher  # noqa: E402

BASE_URL = "http://site.test/theme/"


class FakeResponse:
    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content


class FakeSession:
    """按 URL 返回预设内容的 session

    pages 的值可以是 bytes（200）、int（状态码）、FakeResponse 或异常实例。
    未登记的 URL 返回 404。
    """

    def __init__(self, pages=None, delay=0.0, proxy_error=None):
        self.pages = dict(pages or {})
        self.delay = delay
        self.proxy_error = proxy_error
        self.calls = []
        self.in_flight = 0
        self.peak = 0
        self.lock = threading.Lock()

    def get(self, url, headers=None, timeout=None, proxies=None):
        with self.lock:
            self.calls.append((url, proxies, headers))
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if proxies and self.proxy_error is not None:
                raise self.proxy_error
            value = self.pages.get(url, 404)
            if isinstance(value, Exception):
                raise value
            if isinstance(value, FakeResponse):
                return value
            if isinstance(value, int):
                return FakeResponse(value, b"")
            return FakeResponse(200, value)
        finally:
            with self.lock:
                self.in_flight -= 1

    def urls(self):
        return [call[0] for call in self.calls]

    def count(self, url):
        return self.urls().count(url)


def site_url(path):
    return BASE_URL + path


@pytest.fixture
def save_folder(tmp_path):
    return str(tmp_path / "site")


@pytest.fixture
def make_crawler(save_folder):
    def _make(pages, threads=3, delay=0.0, index_url="index.html"):
        session = FakeSession({site_url(k): v for k, v in pages.items()}, delay=delay)
        fetcher = Fetcher(session=session)
        crawler = CrawlSite(BASE_URL, index_url, save_folder, fetcher=fetcher, threads=threads)
        return crawler, session
    return _make


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")
