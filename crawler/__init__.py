"""网站镜像模块

负责页面和静态资源的获取、解析和保存。
"""

__version__ = "0.1.0"

from .crawl_site import CrawlSite
from .downloader import Downloader
from .extractor import AssetExtractor
from .fetcher import Fetcher, FetchResponse
from .models import AssetKind, Reference, ResolvedTarget, DownloadTask, PageAssets
from .paths import PathResolver, ExistenceGuard

__all__ = [
    "CrawlSite",
    "Downloader",
    "AssetExtractor",
    "Fetcher",
    "FetchResponse",
    "AssetKind",
    "Reference",
    "ResolvedTarget",
    "DownloadTask",
    "PageAssets",
    "PathResolver",
    "ExistenceGuard",
]
