"""文件下载模块

多线程任务调度器：
- 任务提交时先登记到队列计数，再交给工作线程执行
- 槽位池限制同时进行的网络操作数量
- 页面任务失败中止整个抓取，资源任务失败只记录日志
"""

import threading
import queue
from logger import setup_logger
from utils.error_handler import CrawlAborted
from utils.slot_pool import SlotPool

# 获取 logger 实例
logger = setup_logger(__name__)

# 任务结果
SAVED = 'saved'
SKIPPED = 'skipped'
FAILED = 'failed'

# 通知工作线程退出
_STOP = object()


class Downloader:
    """任务调度器，负责并发执行下载任务并等待全部完成

    队列的未完成计数就是完成计数器：submit() 在任务可被执行之前就已登记，
    运行中的任务提交的子任务也会在父任务完成前登记，因此 wait_all()
    不会在子任务完成前返回。
    """

    def __init__(self, handler, threads=5):
        """初始化调度器

        Args:
            handler: 执行单个任务的函数，返回 SAVED 或 SKIPPED，失败时抛出异常
            threads: 槽位数，即同时执行的任务上限
        """
        self.handler = handler
        self.threads = threads
        self.queue = queue.Queue()
        self.slots = SlotPool(threads)
        self.lock = threading.Lock()
        self.workers = []
        self.results = {SAVED: 0, SKIPPED: 0, FAILED: 0}
        self.fatal_error = None
        self.abort_event = threading.Event()

    def start(self):
        """启动工作线程，重复调用无副作用"""
        with self.lock:
            if self.workers:
                return
            logger.info(f"启动下载线程，线程数: {self.threads}")
            for i in range(self.threads):
                worker = threading.Thread(target=self._worker, name=f"DownloaderWorker-{i}")
                worker.daemon = True
                worker.start()
                self.workers.append(worker)

    def submit(self, task):
        """提交任务

        Args:
            task: DownloadTask 实例
        """
        self.start()
        self.queue.put(task)
        logger.debug(f"提交任务: {task.kind.value} {task.target.remote_url}")

    @property
    def aborted(self):
        return self.abort_event.is_set()

    @property
    def peak_in_flight(self):
        return self.slots.peak

    def _record(self, outcome):
        with self.lock:
            self.results[outcome] += 1

    def _worker(self):
        """工作线程函数"""
        while True:
            task = self.queue.get()
            try:
                if task is _STOP:
                    break
                if self.aborted:
                    logger.debug(f"抓取已中止，丢弃任务: {task.target.remote_url}")
                    continue
                self._run(task)
            finally:
                # 确保 task_done() 被调用
                self.queue.task_done()

    def _run(self, task):
        """在槽位内执行任务，任何退出路径都会释放槽位"""
        try:
            with self.slots:
                outcome = self.handler(task)
        except Exception as e:
            if task.is_page:
                self._abort(task, e)
            else:
                logger.error(f"下载失败，放弃该资源: {task.target.remote_url}, 错误: {e}")
                self._record(FAILED)
            return
        self._record(outcome or SAVED)

    def _abort(self, task, error):
        with self.lock:
            if self.fatal_error is None:
                self.fatal_error = error
            self.results[FAILED] += 1
        self.abort_event.set()
        logger.error(f"页面抓取失败，中止抓取: {task.target.remote_url}, 错误: {error}")

    def wait_all(self):
        """等待所有任务完成（包括执行过程中新提交的任务）

        Returns:
            dict: 各结果的任务数

        Raises:
            CrawlAborted: 有页面任务失败
        """
        self.queue.join()

        with self.lock:
            workers, self.workers = self.workers, []
        for _ in workers:
            self.queue.put(_STOP)
        for worker in workers:
            worker.join()

        if self.fatal_error is not None:
            raise CrawlAborted(self.fatal_error) from self.fatal_error

        logger.info(f"下载完成，保存 {self.results[SAVED]} 个，跳过 {self.results[SKIPPED]} 个，"
                    f"失败 {self.results[FAILED]} 个")
        return dict(self.results)
