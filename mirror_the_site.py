#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""MirrorTheSite 主脚本

网站静态资源镜像工具的命令行入口，负责：
1. 解析命令行参数
2. 加载和合并配置
3. 初始化日志
4. 启动抓取流程
"""

import sys
import argparse
from config import load_config
from crawler.crawl_site import CrawlSite
from logger import setup_logger, configure_logging, close_all_loggers
from utils.error_handler import MirrorError

logger = setup_logger(__name__)


def parse_args(args_list=None):
    """解析命令行参数

    Args:
        args_list: 可选的参数列表，默认读取 sys.argv

    Returns:
        argparse.Namespace: 解析后的参数
    """
    parser = argparse.ArgumentParser(
        description="MirrorTheSite - 把网站的页面、样式表、脚本和图片镜像到本地"
    )

    parser.add_argument(
        "--url", "-u",
        type=str,
        default=None,
        help="站点根地址，引用都拼接在其后"
    )

    parser.add_argument(
        "--index", "-i",
        type=str,
        default=None,
        help="首页路径（相对于站点根地址）"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="保存目录"
    )

    parser.add_argument(
        "--threads", "-p",
        type=int,
        default=None,
        help="同时进行的网络请求上限"
    )

    parser.add_argument(
        "--proxy",
        type=str,
        default=None,
        help="代理地址，如 http://127.0.0.1:1080"
    )

    parser.add_argument(
        "--no-proxy",
        action="store_true",
        help="不使用代理"
    )

    parser.add_argument(
        "--user-agent",
        type=str,
        default=None,
        help="自定义用户代理字符串"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="请求超时（秒）"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="用户配置文件路径"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="日志级别"
    )

    return parser.parse_args(args_list)


def update_config(args):
    """根据命令行参数更新配置

    Args:
        args: 解析后的命令行参数

    Returns:
        dict: 更新后的配置
    """
    config = load_config(args.config)
    crawl_config = config.setdefault("crawl", {})
    proxy_config = config.setdefault("proxy", {})

    if args.url:
        config["themes_url"] = args.url

    if args.index:
        config["index_url"] = args.index

    if args.output:
        config["save_folder"] = args.output

    if args.threads is not None:
        crawl_config["threads"] = max(1, args.threads)

    if args.user_agent is not None:
        crawl_config["user_agent"] = args.user_agent

    if args.timeout is not None:
        crawl_config["timeout"] = args.timeout

    # 代理配置
    if args.proxy:
        proxy_config["enable"] = True
        proxy_config["url"] = args.proxy
    if args.no_proxy:
        proxy_config["enable"] = False

    if args.log_level:
        config.setdefault("logging", {})["level"] = args.log_level

    return config


def main(args_list=None):
    """主函数

    Args:
        args_list: 可选的参数列表

    Returns:
        int: 退出码，0 表示成功，1 表示抓取中止
    """
    args = parse_args(args_list)
    config = update_config(args)
    configure_logging(config.get("logging"))

    proxy_config = config.get("proxy", {})
    logger.info("开始镜像网站...")
    logger.info(f"站点地址: {config['themes_url']}")
    logger.info(f"代理: {proxy_config.get('url') if proxy_config.get('enable') else '未启用'}")

    try:
        results = CrawlSite.from_config(config).crawl_site()
    except MirrorError as e:
        logger.error(f"镜像失败: {e}")
        return 1
    finally:
        close_all_loggers()

    print(f"镜像完成: 保存 {results['saved']}，跳过 {results['skipped']}，失败 {results['failed']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
