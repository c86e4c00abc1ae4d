"""路径解析模块

- PathResolver: 把站内引用映射为远程地址和本地保存路径
- ExistenceGuard: 文件已存在则跳过，是唯一的去重和防循环机制
"""

import os
import posixpath
from crawler.models import Reference, ResolvedTarget
from utils.error_handler import MalformedReference


def strip_suffix(value: str) -> str:
    """去掉第一个 ? 或 # 及其之后的内容

    Args:
        value: 原始引用字符串

    Returns:
        str: 去掉查询参数和片段后的字符串
    """
    cut = len(value)
    for marker in ('?', '#'):
        index = value.find(marker)
        if index != -1 and index < cut:
            cut = index
    return value[:cut]


def join_relative(css_path: str, value: str) -> str:
    """把样式表中的引用拼接到样式表所在目录

    只做一次普通的路径拼接（posixpath.join 后 normpath），不再额外处理 ..；
    以 / 开头的引用同样拼接在样式表目录下

    Args:
        css_path: 样式表相对于站点根目录的路径
        value: url(...) 中去掉引号和后缀后的路径

    Returns:
        str: 相对于站点根目录的路径
    """
    css_dir = posixpath.dirname(strip_suffix(css_path).lstrip('/'))
    joined = posixpath.join(css_dir, value.lstrip('/'))
    return posixpath.normpath(joined) if joined else ''


class PathResolver:
    """把引用解析为 ResolvedTarget"""

    def __init__(self, base_url, save_folder):
        """初始化路径解析器

        Args:
            base_url: 站点根地址，引用直接拼接在其后
            save_folder: 本地保存根目录
        """
        if not base_url.endswith('/'):
            base_url += '/'
        self.base_url = base_url
        self.save_folder = save_folder

    def site_path(self, reference: Reference) -> str:
        """计算引用相对于站点根目录的路径，中间的 .. 也按普通路径规则折叠"""
        path = strip_suffix(reference.raw_value.strip()).lstrip('/')
        if not path or path.endswith('/'):
            raise MalformedReference(f"没有文件名的引用: {reference.raw_value!r}")

        path = posixpath.normpath(path)
        if path == '.':
            raise MalformedReference(f"没有文件名的引用: {reference.raw_value!r}")
        if path == '..' or path.startswith('../'):
            raise MalformedReference(f"引用超出站点根目录: {reference.raw_value!r}")
        return path

    def resolve(self, reference: Reference) -> ResolvedTarget:
        """解析引用

        Args:
            reference: 资源引用

        Returns:
            ResolvedTarget: 远程地址和本地路径

        Raises:
            MalformedReference: 引用无法映射为文件路径
        """
        path = self.site_path(reference)
        local_path = os.path.join(self.save_folder, *path.split('/'))
        return ResolvedTarget(
            remote_url=self.base_url + path,
            local_path=local_path,
            site_path=path,
        )


class ExistenceGuard:
    """检查目标文件是否已经存在

    检查与写入之间没有加锁：两个任务可能同时通过检查并各自写入同一文件，
    对于同一地址内容一致的镜像场景，后写入者覆盖即可。
    """

    def should_skip(self, local_path: str) -> bool:
        """文件已存在时返回 True"""
        return os.path.isfile(local_path)
