"""网站镜像模块

核心抓取逻辑，负责：
1. 抓取并保存首页
2. 提取样式表、脚本、图片并提交下载任务
3. 样式表下载后提取其中引用的图片
4. 递归抓取站内页面
5. 等待所有任务完成

首页或页面抓取失败会中止整个抓取，单个资源失败只记录日志。
"""

import os
from crawler.downloader import Downloader, SAVED, SKIPPED
from crawler.extractor import AssetExtractor, is_followable, is_absolute_static
from crawler.fetcher import Fetcher
from crawler.models import AssetKind, DownloadTask, Reference
from crawler.paths import PathResolver, ExistenceGuard
from logger import setup_logger
from config import DEFAULT_THREADS
from utils.error_handler import MirrorError, LocalIOFailure, MalformedReference, CrawlAborted

# 获取 logger 实例
logger = setup_logger(__name__)


class CrawlSite:
    """网站镜像类，把站点的页面和静态资源保存到本地目录"""

    def __init__(self, themes_url, index_url, save_folder, fetcher=None, threads=DEFAULT_THREADS):
        """初始化抓取器

        Args:
            themes_url: 站点根地址
            index_url: 首页相对于站点根地址的路径
            save_folder: 保存目录
            fetcher: 请求器实例，默认直接请求
            threads: 同时进行的网络操作上限
        """
        self.themes_url = themes_url
        self.index_url = index_url
        self.save_folder = save_folder
        self.threads = threads
        self.fetcher = fetcher or Fetcher()
        self.resolver = PathResolver(themes_url, save_folder)
        self.guard = ExistenceGuard()
        self.extractor = AssetExtractor()
        self.downloader = Downloader(self._handle_task, threads=threads)

    @classmethod
    def from_config(cls, config, fetcher=None):
        """根据配置字典创建抓取器"""
        return cls(
            config['themes_url'],
            config['index_url'],
            config['save_folder'],
            fetcher=fetcher or Fetcher.from_config(config),
            threads=config.get('crawl', {}).get('threads', DEFAULT_THREADS),
        )

    def crawl_site(self):
        """开始抓取网站

        Returns:
            dict: 保存、跳过、失败的任务数

        Raises:
            CrawlAborted: 首页或页面抓取失败
        """
        logger.info(f"开始抓取网站: {self.themes_url}")
        logger.info(f"首页: {self.index_url}")
        logger.info(f"保存路径: {self.save_folder}")
        logger.info(f"并发数: {self.threads}")

        index_reference = Reference(self.themes_url, AssetKind.HTML, self.index_url)
        try:
            target = self.resolver.resolve(index_reference)
            document = self.fetcher.fetch_document(target.remote_url)
            self._save(target, document.response.content)
        except MirrorError as e:
            logger.error(f"首页抓取失败: {self.themes_url}{self.index_url}, 错误: {e}")
            raise CrawlAborted(e) from e

        self._dispatch_page(target, document.soup)

        logger.info("等待所有任务完成...")
        results = self.downloader.wait_all()
        logger.info(f"抓取完成，最大同时请求数: {self.downloader.peak_in_flight}")
        return results

    def _dispatch_page(self, page, soup):
        """提取页面中的引用并提交任务

        Args:
            page: 页面的 ResolvedTarget
            soup: 解析后的页面
        """
        assets = self.extractor.extract_from_html(soup)

        for css_url in assets.css:
            self._submit_static(page.remote_url, AssetKind.CSS, css_url)
        for script_url in assets.js:
            self._submit_static(page.remote_url, AssetKind.JS, script_url)
        for img_url in assets.img:
            self._submit(page.remote_url, AssetKind.IMAGE, img_url)

        for href in assets.page_links:
            if is_followable(href):
                self._submit(page.remote_url, AssetKind.HTML, href)
            else:
                logger.debug(f"不跟踪的链接: {href}")

    def _submit_static(self, source_url, kind, value):
        """提交样式表或脚本任务，绝对地址或本地已存在的文件不下载"""
        if is_absolute_static(value):
            logger.warning(f"特殊链接，跳过: {value}")
            return
        self._submit(source_url, kind, value, skip_existing=True)

    def _submit(self, source_url, kind, value, skip_existing=False):
        reference = Reference(source_url, kind, value)
        try:
            target = self.resolver.resolve(reference)
        except MalformedReference as e:
            logger.debug(f"忽略引用: {e}")
            return

        if skip_existing and self.guard.should_skip(target.local_path):
            logger.warning(f"文件已存在，跳过: {target.local_path}")
            return

        self.downloader.submit(DownloadTask(target, kind, reference))

    def _handle_task(self, task):
        """执行单个任务，在调度器的工作线程中运行"""
        if self.guard.should_skip(task.target.local_path):
            logger.info(f"文件已存在，跳过: {task.target.local_path}")
            return SKIPPED

        if task.kind is AssetKind.HTML:
            self._crawl_page(task)
        elif task.kind is AssetKind.CSS:
            self._download_stylesheet(task)
        else:
            content = self.fetcher.fetch_bytes(task.target.remote_url)
            self._save(task.target, content)
        return SAVED

    def _crawl_page(self, task):
        """抓取单个页面：保存，提取资源，继续递归"""
        logger.info(f"抓取页面: {task.target.remote_url}")
        document = self.fetcher.fetch_document(task.target.remote_url)
        self._save(task.target, document.response.content)
        self._dispatch_page(task.target, document.soup)

    def _download_stylesheet(self, task):
        """下载样式表，并提交其中引用的图片"""
        response = self.fetcher.fetch(task.target.remote_url)
        response.raise_for_error()
        self._save(task.target, response.content)

        css_path = task.target.site_path
        for image_path in self.extractor.extract_from_css(css_path, response.text):
            self._submit(css_path, AssetKind.CSS_IMAGE, image_path)

    def _save(self, target, content):
        """把内容原样写入本地文件

        Raises:
            LocalIOFailure: 创建目录或写文件失败
        """
        try:
            os.makedirs(os.path.dirname(target.local_path) or '.', exist_ok=True)
            with open(target.local_path, 'wb') as f:
                f.write(content)
        except (IOError, OSError) as e:
            raise LocalIOFailure(target.local_path, e) from e
        logger.info(f"保存文件: {target.local_path}")
