"""资源提取模块

从HTML文档中提取样式表、脚本、图片和页面链接，
从样式表文本中提取 url(...) 引用的图片。
"""

import re
from typing import List
from bs4 import BeautifulSoup
from crawler.models import PageAssets
from crawler.paths import strip_suffix, join_relative
from logger import setup_logger

logger = setup_logger(__name__)

CSS_URL_PATTERN = re.compile(r"url\((.*?)\)")

# 不作为子页面跟踪的链接
NON_FOLLOWABLE_LINKS = ('#', 'index.html')


def _attr_values(soup: BeautifulSoup, selector: str, attr: str) -> List[str]:
    """按文档顺序返回匹配元素的属性值，缺失或为空的属性跳过"""
    values = []
    for element in soup.select(selector):
        value = element.get(attr)
        if value is None:
            continue
        value = value.strip()
        if value:
            values.append(value)
    return values


def is_followable(href: str) -> bool:
    """判断链接是否是需要递归抓取的站内页面"""
    return href not in NON_FOLLOWABLE_LINKS and '.html' in href


def is_absolute_static(value: str) -> bool:
    """带 http:// 前缀的样式表和脚本不下载"""
    return value.startswith('http://')


class AssetExtractor:
    """资源引用提取器"""

    def extract_from_html(self, soup: BeautifulSoup) -> PageAssets:
        """提取页面中的资源引用

        Args:
            soup: 解析后的HTML文档

        Returns:
            PageAssets: 样式表、脚本、图片和页面链接，保持文档顺序，不去重
        """
        return PageAssets(
            css=_attr_values(soup, 'link[href]', 'href'),
            js=_attr_values(soup, 'script[src]', 'src'),
            img=_attr_values(soup, 'img[src]', 'src'),
            page_links=_attr_values(soup, 'a[href]', 'href'),
        )

    def extract_from_css(self, css_path: str, css_text: str) -> List[str]:
        """提取样式表中引用的本地图片

        url(...) 中包含 . 且不包含 http 的才视为本地文件；去掉引号和 ?/# 后缀后，
        拼接到样式表所在目录。

        Args:
            css_path: 样式表相对于站点根目录的路径
            css_text: 样式表内容

        Returns:
            list: 相对于站点根目录的图片路径，按出现顺序
        """
        images = []
        for match in CSS_URL_PATTERN.finditer(css_text):
            value = match.group(1)
            if '.' not in value or 'http' in value:
                logger.debug(f"跳过样式表引用: {match.group(0)}")
                continue
            value = strip_suffix(value.replace("'", '').replace('"', '').strip())
            if not value:
                continue
            path = join_relative(css_path, value)
            if path:
                images.append(path)
        return images
