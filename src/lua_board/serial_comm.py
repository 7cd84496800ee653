"""
Serial Communication Layer

시리얼 포트 연결 및 바이트 단위 송수신을 담당하는 래퍼 클래스
Lua RTOS 콘솔 설정: 115200 baud, 8N1, 흐름 제어 없음
"""

import sys
import logging
import threading
from typing import Optional, List

import serial
import serial.tools.list_ports

from .config import DEFAULT_BAUDRATE, DEFAULT_READ_TIMEOUT, DEFAULT_WRITE_TIMEOUT
from .exceptions import ConnectionError, CommunicationError, TimeoutError

logger = logging.getLogger(__name__)


DEFAULT_BYTESIZE = serial.EIGHTBITS
DEFAULT_PARITY = serial.PARITY_NONE
DEFAULT_STOPBITS = serial.STOPBITS_ONE


class SerialConnection:
    """
    시리얼 포트 연결 관리 클래스

    수신 데이터는 버리지 않음 (Inspector가 모든 바이트를 소비)

    Context manager 지원:
        with SerialConnection('/dev/ttyUSB0') as conn:
            conn.write(b'os.ls("/")\\r\\n')
            byte = conn.read(1)
    """

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = DEFAULT_READ_TIMEOUT,
        write_timeout: float = DEFAULT_WRITE_TIMEOUT
    ):
        """
        Args:
            port: 시리얼 포트 이름
                  - Windows: 'COM3', 'COM4', ...
                  - Linux: '/dev/ttyUSB0', '/dev/ttyACM0', ...
                  - macOS: '/dev/cu.SLAB_USBtoUART', ...
            baudrate: 보레이트 (기본값: 115200)
            timeout: 읽기 폴링 타임아웃 (초)
            write_timeout: 쓰기 타임아웃 (초)
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.write_timeout = write_timeout

        self._serial: Optional[serial.Serial] = None
        self._lock = threading.Lock()  # 쓰기 전용 Lock (읽기는 Inspector 스레드 단독)

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._serial is not None and self._serial.is_open

    def connect(self) -> bool:
        """
        시리얼 포트 연결 (DTR/RTS 흐름 제어 무시)

        Returns:
            성공 시 True

        Raises:
            ConnectionError: 연결 실패 시
        """
        if self.is_connected:
            logger.warning(f"Already connected to {self.port}")
            return True

        try:
            self._serial = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                bytesize=DEFAULT_BYTESIZE,
                parity=DEFAULT_PARITY,
                stopbits=DEFAULT_STOPBITS,
                timeout=self.timeout,
                write_timeout=self.write_timeout,
                rtscts=False,
                dsrdtr=False
            )
            logger.info(f"Connected to {self.port} at {self.baudrate} baud")
            return True

        except (serial.SerialException, OSError) as e:
            raise ConnectionError(f"Failed to connect to {self.port}: {e}")

    def disconnect(self) -> None:
        """
        시리얼 포트 연결 해제 (스레드 안전)

        Inspector 스레드에서도 호출되므로 진행 중인 쓰기가 끝난 뒤 닫음
        """
        with self._lock:
            port, self._serial = self._serial, None

        if port is not None:
            try:
                if port.is_open:
                    port.close()
                    logger.info(f"Disconnected from {self.port}")
            except (serial.SerialException, OSError) as e:
                logger.error(f"Error closing serial port: {e}")

    def write(self, data: bytes) -> int:
        """
        데이터 전송 (스레드 안전)

        Args:
            data: 전송할 바이트 데이터

        Returns:
            전송된 바이트 수

        Raises:
            CommunicationError: 전송 실패 시
            TimeoutError: 쓰기 타임아웃 시
        """
        with self._lock:
            port = self._serial
            if port is None or not port.is_open:
                raise CommunicationError("Not connected to serial port")

            try:
                bytes_written = port.write(data)
                port.flush()

                logger.debug(f"TX ({bytes_written} bytes): {data!r}")
                return bytes_written

            except serial.SerialTimeoutException:
                raise TimeoutError("Write timeout")
            except (serial.SerialException, OSError) as e:
                raise CommunicationError(f"Failed to send data: {e}")

    def read(self, size: int = 1) -> bytes:
        """
        데이터 수신 (Inspector 스레드 전용)

        Args:
            size: 최대 수신 바이트 수

        Returns:
            수신된 바이트 (폴링 타임아웃 시 b'')

        Raises:
            CommunicationError: 포트 오류 또는 연결 끊김
        """
        port = self._serial
        if port is None:
            raise CommunicationError("Not connected to serial port")

        try:
            return port.read(size)
        except (serial.SerialException, OSError) as e:
            raise CommunicationError(f"Failed to receive data: {e}")

    def apply(self, baudrate: int, dtr: bool, rts: bool) -> None:
        """
        포트 설정 및 제어선 상태 적용

        ESP32 자동 리셋 회로: RTS 활성 + DTR 비활성이면 EN 이 Low 로 유지되고,
        RTS 를 해제하면 보드가 리셋에서 빠져나옴

        Args:
            baudrate: 보레이트
            dtr: DTR 라인 활성 여부
            rts: RTS 라인 활성 여부

        Raises:
            CommunicationError: 설정 실패 시
        """
        with self._lock:
            port = self._serial
            if port is None or not port.is_open:
                raise CommunicationError("Not connected to serial port")

            try:
                port.baudrate = baudrate
                port.dtr = dtr
                port.rts = rts
                logger.debug(f"Applied {baudrate} baud, DTR={int(dtr)} RTS={int(rts)}")
            except (serial.SerialException, OSError, ValueError) as e:
                raise CommunicationError(f"Failed to apply port settings: {e}")

    def __enter__(self) -> 'SerialConnection':
        """Context manager entry"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.disconnect()

    @staticmethod
    def list_ports() -> List[str]:
        """
        사용 가능한 시리얼 포트 목록 조회

        Returns:
            포트 이름 목록
        """
        ports = serial.tools.list_ports.comports()
        return [port.device for port in ports]

    @staticmethod
    def get_default_port() -> Optional[str]:
        """
        플랫폼에 맞는 기본 포트 반환

        Returns:
            - Windows: 첫 번째 COM 포트
            - Linux: /dev/ttyUSB0 또는 /dev/ttyACM0
        """
        ports = SerialConnection.list_ports()

        if not ports:
            return None

        if sys.platform == 'win32':
            return ports[0]

        # USB-UART 브리지 (CP210x, CH340) 우선
        for preferred in ['/dev/ttyUSB0', '/dev/ttyACM0']:
            if preferred in ports:
                return preferred
        return ports[0]
