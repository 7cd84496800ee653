"""
RxQueue Unit Tests

수신 큐 테스트:
- FIFO 순서
- 타임아웃
- 비우기 (drain)
- 닫힘 처리
"""

import threading
import time
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from lua_board.rx_queue import RxQueue
from lua_board.exceptions import CommunicationError, TimeoutError


class TestRxQueueOrder:
    """FIFO 테스트"""

    def test_fifo(self):
        q = RxQueue()
        for byte in b'abc':
            q.put(byte)

        assert [q.get(timeout=0.1) for _ in range(3)] == list(b'abc')

    def test_default_capacity(self):
        assert RxQueue().maxsize == 10240

    def test_put_blocks_when_full(self):
        """가득 차면 버리지 않고 대기"""
        q = RxQueue(maxsize=1)
        q.put(1)

        done = threading.Event()

        def producer():
            q.put(2)
            done.set()

        threading.Thread(target=producer, daemon=True).start()
        assert not done.wait(0.2)

        assert q.get(timeout=0.1) == 1
        assert done.wait(1.0)
        assert q.get(timeout=0.1) == 2


class TestRxQueueTimeout:
    """타임아웃 테스트"""

    def test_get_timeout(self):
        q = RxQueue()
        start = time.monotonic()

        with pytest.raises(TimeoutError):
            q.get(timeout=0.2)

        assert time.monotonic() - start >= 0.15

    def test_zero_timeout_returns_available_byte(self):
        q = RxQueue()
        q.put(7)
        assert q.get(timeout=0) == 7


class TestRxQueueDrain:
    """비우기 테스트"""

    def test_drain_discards_everything(self):
        q = RxQueue()
        for byte in range(10):
            q.put(byte)

        assert q.drain() == 10
        assert len(q) == 0

    def test_drain_waits_settle_time(self):
        q = RxQueue()
        start = time.monotonic()
        q.drain(settle=0.1)
        assert time.monotonic() - start >= 0.09


class TestRxQueueClose:
    """닫힘 테스트"""

    def test_get_after_close_raises(self):
        q = RxQueue()
        q.close()

        with pytest.raises(CommunicationError):
            q.get(timeout=1.0)

    def test_remaining_bytes_readable_after_close(self):
        q = RxQueue()
        q.put(1)
        q.close()

        assert q.get() == 1
        with pytest.raises(CommunicationError):
            q.get()

    def test_put_after_close_rejected(self):
        q = RxQueue()
        q.close()

        assert q.put(1) is False
        assert q.closed


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
