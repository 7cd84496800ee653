"""
Lua RTOS Board Communication Library

Lua RTOS (ESP32) 보드 쉘 시리얼 통신 라이브러리
- 연결 / 리셋 (부팅 배너 추적)
- Lua 명령 실행
- 보드 파일시스템 파일 송수신 (청크 단위)
- 리셋 / 런타임 에러 알림

사용 예:
    from lua_board import BoardSession, CollectingNotifier

    notifier = CollectingNotifier()
    with BoardSession(notifier=notifier) as session:
        board = session.attach('/dev/ttyUSB0')
        if board is not None:
            print(board.info)
            board.write_file('/hello.lua', b'print("hello")')
            for entry in board.get_dir_content('/'):
                print(entry.name, entry.size)
"""

__version__ = '1.0.0'

# Core classes
from .board import Board
from .session import BoardSession
from .serial_comm import SerialConnection
from .config import BoardConfig, load_config

# Protocol engine
from .boot import BootSequencer, BootState
from .filesystem import FileTransfer, DirEntry, parse_dir_listing, dir_content_json
from .inspector import Inspector, classify_line
from .rx_queue import RxQueue
from .notifications import (
    Event, Notification, Notifier,
    LoggingNotifier, CollectingNotifier
)

# Exceptions
from .exceptions import (
    BoardError,
    CommunicationError,
    ConnectionError,
    TimeoutError,
    ResponseError,
    EchoMismatchError,
    ConfigError
)

__all__ = [
    # Version
    '__version__',

    # Core
    'Board',
    'BoardSession',
    'SerialConnection',
    'BoardConfig',
    'load_config',

    # Protocol engine
    'BootSequencer',
    'BootState',
    'FileTransfer',
    'DirEntry',
    'parse_dir_listing',
    'dir_content_json',
    'Inspector',
    'classify_line',
    'RxQueue',

    # Notifications
    'Event',
    'Notification',
    'Notifier',
    'LoggingNotifier',
    'CollectingNotifier',

    # Exceptions
    'BoardError',
    'CommunicationError',
    'ConnectionError',
    'TimeoutError',
    'ResponseError',
    'EchoMismatchError',
    'ConfigError',
]
