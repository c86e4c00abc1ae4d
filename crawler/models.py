"""数据模型

引用、解析后的目标和下载任务都是不可变的值对象，
共享的可变状态只存在于 Downloader 中。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class AssetKind(Enum):
    """资源类型"""
    CSS = "css"
    JS = "js"
    IMAGE = "image"
    HTML = "html"
    CSS_IMAGE = "css_image"


@dataclass(frozen=True)
class Reference:
    """解析页面或样式表时发现的一次资源引用

    source_url: 发现该引用的页面或样式表（CSS_IMAGE 时为样式表的站内路径）
    raw_value: 属性或 url(...) 中的原始字符串
    """
    source_url: str
    kind: AssetKind
    raw_value: str


@dataclass(frozen=True)
class ResolvedTarget:
    """远程地址到本地路径的映射"""
    remote_url: str
    local_path: str
    # 相对于站点根目录的路径，CSS 中的图片需要据此计算所在目录
    site_path: str


@dataclass(frozen=True)
class DownloadTask:
    """调度器中的一个工作单元"""
    target: ResolvedTarget
    kind: AssetKind
    reference: Reference

    @property
    def is_page(self) -> bool:
        """页面任务失败会中止整个抓取"""
        return self.kind is AssetKind.HTML


@dataclass
class PageAssets:
    """从一个HTML文档中提取出的原始引用，按文档顺序，不去重"""
    css: List[str] = field(default_factory=list)
    js: List[str] = field(default_factory=list)
    img: List[str] = field(default_factory=list)
    page_links: List[str] = field(default_factory=list)
