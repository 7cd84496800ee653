"""
RX Byte Queue

Inspector(생산자)와 프로토콜 코드(소비자) 사이의 유일한 전달 지점
- 단일 생산자 / 단일 소비자, FIFO, 용량 제한
- 가득 차면 생산자가 대기 (바이트를 버리지 않음)
- 바이트 폐기는 drain() 호출로만 발생
"""

import logging
import queue
import threading
import time
from typing import Optional

from .config import DEFAULT_QUEUE_SIZE
from .exceptions import CommunicationError, TimeoutError

logger = logging.getLogger(__name__)


# 닫힘 상태 확인 주기 (초)
POLL_INTERVAL = 0.1


class RxQueue:
    """수신 바이트 큐"""

    def __init__(self, maxsize: int = DEFAULT_QUEUE_SIZE):
        self.maxsize = maxsize
        self._queue: 'queue.Queue[int]' = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def __len__(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        """큐 닫기 (대기 중인 소비자는 남은 바이트 소비 후 CommunicationError)"""
        self._closed.set()

    def put(self, byte: int) -> bool:
        """
        바이트 추가 (가득 차면 공간이 생길 때까지 대기)

        Returns:
            추가 성공 시 True, 큐가 닫혀 있으면 False
        """
        while not self._closed.is_set():
            try:
                self._queue.put(byte, timeout=POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def get(self, timeout: Optional[float] = None) -> int:
        """
        바이트 1개 읽기 (블로킹)

        Args:
            timeout: 최대 대기 시간 (초), None이면 무한 대기

        Returns:
            수신 바이트 (0~255)

        Raises:
            TimeoutError: 제한 시간 내 수신 없음
            CommunicationError: 큐가 닫혔고 비어 있음
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            wait = POLL_INTERVAL
            if deadline is not None:
                wait = max(min(wait, deadline - time.monotonic()), 0.0)

            try:
                return self._queue.get(timeout=wait)
            except queue.Empty:
                if self._closed.is_set():
                    raise CommunicationError("Connection lost (RX queue closed)")
                if deadline is not None and time.monotonic() >= deadline:
                    raise TimeoutError(f"No data received within {timeout:.2f}s")

    def drain(self, settle: float = 0.0) -> int:
        """
        잔여 데이터 폐기

        Args:
            settle: 폐기 전 대기 시간 (초)

        Returns:
            폐기된 바이트 수
        """
        if settle > 0:
            time.sleep(settle)

        count = 0
        while True:
            try:
                self._queue.get_nowait()
                count += 1
            except queue.Empty:
                break

        if count:
            logger.debug(f"Discarded {count} queued bytes")
        return count
