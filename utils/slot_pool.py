# 并发槽位池模块
"""
提供固定容量的并发槽位，用于限制同时进行的网络操作数量。
"""

import threading
from logger import setup_logger

logger = setup_logger(__name__)


class SlotPool:
    """固定容量的槽位池，基于有界信号量实现

    可以作为上下文管理器使用，保证任何退出路径（包括异常）都会释放槽位。
    """

    def __init__(self, capacity: int = 5):
        """初始化槽位池

        Args:
            capacity: 同时可持有的槽位数
        """
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.in_flight = 0
        self.peak = 0
        self._semaphore = threading.BoundedSemaphore(capacity)
        self.lock = threading.Lock()

    def acquire(self) -> None:
        """阻塞直到获得一个槽位"""
        self._semaphore.acquire()
        with self.lock:
            self.in_flight += 1
            if self.in_flight > self.peak:
                self.peak = self.in_flight

    def release(self) -> None:
        """释放一个槽位"""
        with self.lock:
            self.in_flight -= 1
        self._semaphore.release()

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
