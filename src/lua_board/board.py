"""
Lua RTOS Board Main Class

보드와의 세션을 담당하는 메인 클래스
- 연결 / 해제 / 리셋
- 명령 전송 및 응답 수신 (에코 확인, 프롬프트까지 수집)
- 파일 송수신, 코드 실행
"""

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from .boot import BootSequencer, BootState
from .config import BoardConfig
from .exceptions import BoardError, EchoMismatchError, ResponseError
from .filesystem import DirEntry, FileTransfer
from .inspector import Inspector
from .notifications import Event, LoggingNotifier, Notification, Notifier, dispatch
from .protocol import (
    COMMAND_EOL, TRANSFER_EOL, LF, CR,
    decode_line, dofile_command, is_prompt, normalize_info
)
from .rx_queue import RxQueue
from .serial_comm import SerialConnection

logger = logging.getLogger(__name__)


class Board:
    """
    Lua RTOS 보드 세션 클래스

    사용 예:
        # 직접 연결
        board = Board(port='/dev/ttyUSB0')
        board.attach()
        print(board.info)
        print(board.send_command('print(os.clock())'))
        board.detach()

        # Context manager
        with Board(port='/dev/ttyUSB0') as board:
            board.write_file('/main.lua', b'print("hi")')
    """

    def __init__(
        self,
        port: str,
        config: Optional[BoardConfig] = None,
        notifier: Optional[Notifier] = None,
        connection: Optional[SerialConnection] = None
    ):
        """
        Args:
            port: 시리얼 포트 이름
            config: 세션 설정 (None이면 기본값)
            notifier: 알림 수신자 (None이면 로그 출력)
            connection: 시리얼 연결 (None이면 config 로 생성)
        """
        self.port = port
        self.config = config or BoardConfig()
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.connection = connection or SerialConnection(
            port=port,
            baudrate=self.config.baudrate,
            timeout=self.config.read_timeout,
            write_timeout=self.config.write_timeout
        )

        self.info = ''
        self.chunk_size = self.config.chunk_size
        self.boot_notify_suppressed = False
        self.on_connection_lost: Optional[Callable[['Board'], None]] = None

        self._queue = RxQueue(self.config.queue_size)
        self._inspector: Optional[Inspector] = None
        self._boot = BootSequencer(self)
        self._files = FileTransfer(self)
        self._lock = threading.RLock()  # 프로토콜 교환은 한 번에 하나만
        self._attached = False

    @property
    def is_attached(self) -> bool:
        """연결 상태"""
        return self._attached and self.connection.is_connected

    @property
    def boot_state(self) -> Optional[BootState]:
        return self._boot.state

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    # Session lifecycle

    def attach(self) -> bool:
        """
        보드 연결

        포트 열기 → Inspector 시작 → 리셋 → boardAttached 알림

        Returns:
            성공 시 True

        Raises:
            ConnectionError: 포트 열기 실패 시
            TimeoutError: 보드가 부팅을 완료하지 않은 경우
            CommunicationError: 통신 오류 시
        """
        self.connection.connect()

        self._queue = RxQueue(self.config.queue_size)
        self.chunk_size = self.config.chunk_size
        self.boot_notify_suppressed = False

        self._inspector = Inspector(
            self.connection,
            self._queue,
            self.notifier,
            boot_notify_enabled=lambda: not self.boot_notify_suppressed,
            on_failure=self._handle_transport_failure
        )
        self._inspector.start()
        self._attached = True

        try:
            self.reset()
        except BoardError as e:
            logger.error(f"Failed to attach board on {self.port}: {e}")
            self.detach()
            raise

        logger.info(f"Board attached on {self.port}")
        dispatch(self.notifier, Notification(Event.ATTACHED))
        return True

    def detach(self) -> None:
        """보드 연결 해제 (여러 번 호출해도 안전)"""
        was_attached = self._attached
        self._attached = False

        self._queue.close()
        if self._inspector is not None:
            self._inspector.stop()
            self._inspector = None

        self.connection.disconnect()

        if was_attached:
            logger.info(f"Board detached from {self.port}")

    def _handle_transport_failure(self, error: Exception) -> None:
        """Inspector 스레드에서 호출: 포트 오류는 세션 종료로 처리"""
        logger.error(f"Connection to {self.port} lost: {error}")
        self._attached = False
        self._queue.close()
        self.connection.disconnect()

        if self.on_connection_lost is not None:
            self.on_connection_lost(self)

    # Serial primitives

    def write(self, data: bytes) -> int:
        """원시 바이트 전송"""
        return self.connection.write(data)

    def read_byte(self, timeout: Optional[float] = None) -> int:
        """
        수신 큐에서 1바이트 읽기

        Raises:
            TimeoutError: 제한 시간 초과
            CommunicationError: 연결 끊김
        """
        return self._queue.get(timeout=timeout)

    def read_line(self, timeout: Optional[float] = None) -> str:
        """
        수신 큐에서 한 줄 읽기 (CR 제거, LF 미포함)

        Args:
            timeout: 한 줄 전체에 대한 제한 시간 (초)
        """
        buffer = bytearray()
        # RxQueue.get 은 바이트마다 제한 시간을 새로 세므로 라인 전체 기한은 여기서 관리
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            remaining = None
            if deadline is not None:
                remaining = max(deadline - time.monotonic(), 0.0)

            byte = self._queue.get(timeout=remaining)
            if byte == LF:
                return decode_line(bytes(buffer))
            if byte != CR:
                buffer.append(byte)

    def consume(self) -> int:
        """settle_time 대기 후 수신 큐 비우기"""
        return self._queue.drain(self.config.settle_time)

    # Command protocol

    def verify_echo(self, command: str, timeout: Optional[float] = None) -> bool:
        """
        명령 에코 확인

        불일치 시 남은 응답을 폐기하고 False 반환
        (strict_echo 설정 시 EchoMismatchError)
        """
        echo = self.read_line(timeout=timeout)
        if echo == command:
            return True

        logger.warning(f"Echo mismatch: sent {command!r}, got {echo!r}")
        self.consume()
        if self.config.strict_echo:
            raise EchoMismatchError(command, echo)
        return False

    def send_command(self, command: str, timeout: Optional[float] = None) -> str:
        """
        명령 전송 및 응답 수신

        Args:
            command: Lua 명령 (한 줄)
            timeout: 응답 라인당 제한 시간 (None이면 config.response_timeout)

        Returns:
            프롬프트 이전까지의 응답 본문 ("\\r\\n" 으로 연결),
            에코 불일치 시 빈 문자열

        Raises:
            EchoMismatchError: strict_echo 설정 시 에코 불일치
            TimeoutError: 응답 없음
            CommunicationError: 통신 오류 시
        """
        if timeout is None:
            timeout = self.config.response_timeout

        with self._lock:
            self.write((command + COMMAND_EOL).encode('utf-8'))

            if not self.verify_echo(command, timeout):
                return ''

            lines: List[str] = []
            while True:
                line = self.read_line(timeout=timeout)
                if is_prompt(line):
                    break
                lines.append(line)

        response = COMMAND_EOL.join(lines)
        logger.debug(f"Response to {command!r}: {response!r}")
        return response

    # Board operations

    def reset(self) -> bool:
        """
        보드 리셋

        부팅 완료 대기 → 보드 정보 스크립트 전송 → 보드 정보 조회

        Returns:
            성공 시 True

        Raises:
            TimeoutError: 부팅 배너를 받지 못한 경우
        """
        with self._lock:
            self._boot.run()
            self._push_info_script()
            self.info = self.get_info()

        logger.info(f"board info: {self.info}")
        return True

    def _push_info_script(self) -> None:
        script_path = self.config.info_script_path
        try:
            script = script_path.read_bytes()
        except OSError as e:
            logger.warning(f"Board info script not available ({script_path}): {e}")
            return

        self.write_file(self.config.remote_info_path, script)

    def get_info(self) -> str:
        """보드 정보 조회 (후행 구분자 정리)"""
        info = self.send_command(dofile_command(self.config.remote_info_path))
        return normalize_info(info)

    def info_dict(self) -> Dict[str, Any]:
        """
        보드 정보를 JSON 으로 해석

        Raises:
            ResponseError: 보드 정보가 JSON 이 아닐 때
        """
        try:
            return json.loads(self.info)
        except ValueError as e:
            raise ResponseError(f"Board info is not valid JSON: {e}")

    def get_dir_content(self, path: str) -> List[DirEntry]:
        """디렉토리 목록 조회"""
        return self._files.get_dir_content(path)

    def write_file(self, path: str, data: bytes) -> bool:
        """파일 쓰기 (호스트 → 보드)"""
        return self._files.write_file(path, data)

    def read_file(self, path: str) -> Optional[bytes]:
        """파일 읽기 (보드 → 호스트)"""
        return self._files.read_file(path)

    def run_code(self, path: str, code: bytes) -> bool:
        """
        코드 업로드 후 실행

        리셋 중의 부팅 알림은 숨기고, 리셋 직후 다시 활성화
        autorun.lua 가 대상 파일을 실행하도록 갱신한 뒤 파일을 쓰고 실행

        Args:
            path: 보드에 저장할 파일 경로
            code: Lua 소스

        Returns:
            성공 시 True
        """
        with self._lock:
            self.boot_notify_suppressed = True
            try:
                self.reset()
            finally:
                self.boot_notify_suppressed = False

            autorun = (dofile_command(path) + COMMAND_EOL).encode('utf-8')
            if not self.write_file(self.config.autorun_path, autorun):
                logger.error(f"Failed to update {self.config.autorun_path}")
                return False

            if not self.write_file(path, code):
                logger.error(f"Failed to write {path}")
                return False

            self.write((dofile_command(path) + TRANSFER_EOL).encode('utf-8'))
            self.consume()

        logger.info(f"Running {path}")
        return True

    def __enter__(self) -> 'Board':
        """Context manager entry"""
        self.attach()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.detach()

    @staticmethod
    def list_ports():
        """사용 가능한 시리얼 포트 목록"""
        return SerialConnection.list_ports()
