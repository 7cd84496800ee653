"""
Serial Inspector

시리얼 수신 데이터를 백그라운드에서 감시
- 바이트를 라인 단위로 모아 리셋/런타임 에러 라인을 알림으로 분류
- 모든 수신 바이트를 도착 순서대로 RxQueue 에 정확히 한 번 전달

분류 규칙 (라인마다 모두 실행):
1. 부팅 알림이 활성일 때: POWERON / SW_CPU / DEEPSLEEP 리셋 (첫 번째 일치만)
2. 구조화 런타임 에러: <where>:<line>: <exception>: <message>
3. 2가 아니면 단순 런타임 에러: <where>:<line>: <message> (exception = "0")
"""

import logging
import re
import threading
from typing import Callable, List, Optional, Tuple

from .exceptions import CommunicationError
from .notifications import Event, Notification, Notifier, dispatch
from .protocol import CR, LF, decode_line
from .rx_queue import RxQueue
from .serial_comm import SerialConnection

logger = logging.getLogger(__name__)


# ESP32 ROM 부트로더 리셋 원인 라인
# 예: rst:0x1 (POWERON_RESET),boot:0x13 (SPI_FAST_FLASH_BOOT)
RESET_PATTERNS: List[Tuple[re.Pattern, Event]] = [
    (re.compile(r'^rst:.*\(POWERON_RESET\),boot:.*$'), Event.POWER_ON_RESET),
    (re.compile(r'^rst:.*\(SW_CPU_RESET\),boot:.*$'), Event.SOFTWARE_RESET),
    (re.compile(r'^rst:.*\(DEEPSLEEP_RESET\),boot.*$'), Event.DEEP_SLEEP_RESET),
]

# 예: stdin:1: 12: division by zero
RUNTIME_ERROR_PATTERN = re.compile(r'^([a-zA-Z]*):(\d*):\s(\d*):\s*(.*)$')

# 예: stdin:1: attempt to call a nil value (global 'foo')
LOOSE_ERROR_PATTERN = re.compile(r'^([a-zA-Z]*):(\d*):\s*(.*)$')


def classify_line(line: str, boot_notify: bool = True) -> List[Notification]:
    """
    수신 라인 분류

    Args:
        line: CR 이 제거된 한 줄
        boot_notify: False면 리셋 원인 알림 생략

    Returns:
        발생한 알림 목록 (리셋 원인 최대 1개 + 런타임 에러 최대 1개)
    """
    notifications = []

    if boot_notify:
        for pattern, event in RESET_PATTERNS:
            if pattern.match(line):
                notifications.append(Notification(event))
                break

    match = RUNTIME_ERROR_PATTERN.match(line)
    if match:
        where, line_no, exception, message = match.groups()
        notifications.append(Notification(Event.RUNTIME_ERROR, {
            'where': where,
            'line': line_no,
            'exception': exception,
            'message': message,
        }))
    else:
        match = LOOSE_ERROR_PATTERN.match(line)
        if match:
            where, line_no, message = match.groups()
            notifications.append(Notification(Event.RUNTIME_ERROR, {
                'where': where,
                'line': line_no,
                'exception': '0',
                'message': message,
            }))

    return notifications


class Inspector:
    """
    수신 감시 스레드

    보드가 연결되어 있는 동안 실행되며, 포트 읽기 실패 시
    재시도 없이 종료하고 on_failure 콜백을 한 번 호출
    """

    def __init__(
        self,
        connection: SerialConnection,
        rx_queue: RxQueue,
        notifier: Notifier,
        boot_notify_enabled: Callable[[], bool] = lambda: True,
        on_failure: Optional[Callable[[Exception], None]] = None
    ):
        """
        Args:
            connection: 열린 시리얼 연결
            rx_queue: 수신 바이트를 전달할 큐
            notifier: 알림 수신자
            boot_notify_enabled: 리셋 원인 알림 여부 (라인마다 조회)
            on_failure: 포트 읽기 실패 시 호출
        """
        self._connection = connection
        self._queue = rx_queue
        self._notifier = notifier
        self._boot_notify_enabled = boot_notify_enabled
        self._on_failure = on_failure

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """감시 스레드 시작"""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name=f"Inspector-{self._connection.port}",
            daemon=True,
        )
        self._thread.start()
        logger.debug(f"Inspector started on {self._connection.port}")

    def stop(self, timeout: float = 1.0) -> None:
        """
        감시 스레드 종료 (on_failure 호출 없음)

        포트를 닫기 전에 호출해야 정상 종료로 처리됨
        """
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Inspector thread did not stop cleanly")
        self._thread = None

    def _run(self) -> None:
        line = bytearray()

        while not self._stop_event.is_set():
            try:
                data = self._connection.read(1)
            except CommunicationError as e:
                if not self._stop_event.is_set():
                    logger.error(f"Inspector stopped, transport failure: {e}")
                    if self._on_failure is not None:
                        self._on_failure(e)
                break

            if not data:
                continue

            byte = data[0]
            if byte == LF:
                self._inspect(decode_line(bytes(line)))
                line.clear()
            elif byte != CR:
                line.append(byte)

            self._queue.put(byte)

        logger.debug("Inspector loop exited")

    def _inspect(self, line: str) -> None:
        for notification in classify_line(line, self._boot_notify_enabled()):
            logger.debug(f"Inspector: {notification.name} from {line!r}")
            dispatch(self._notifier, notification)
