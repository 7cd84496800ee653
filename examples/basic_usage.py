"""
Lua RTOS Board Basic Usage Example

보드 통신 라이브러리 기본 사용 예제
"""

import sys
import logging

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def default_port() -> str:
    # Windows: 'COM3', 'COM4' 등
    # Linux: '/dev/ttyUSB0'
    return 'COM3' if sys.platform == 'win32' else '/dev/ttyUSB0'


def example_with_session():
    """
    BoardSession 을 사용한 예제 (권장)

    활성 보드는 세션이 하나만 관리하고, 블록을 벗어나면 자동 해제
    """
    from lua_board import BoardSession

    port = default_port()

    print(f"\n{'='*50}")
    print("Lua RTOS Board Basic Usage Example")
    print(f"Port: {port}")
    print(f"{'='*50}\n")

    with BoardSession() as session:
        board = session.attach(port)
        if board is None:
            print("Attach failed, see log")
            return

        # ===== 보드 정보 =====
        print("[Board Info]")
        print(f"  {board.info}")

        # ===== 명령 실행 =====
        print("\n[Command]")
        print(f"  os.clock() = {board.send_command('print(os.clock())')}")

        # ===== 파일 =====
        print("\n[Files]")
        board.write_file('/hello.lua', b'print("hello")\n')
        print(f"  /hello.lua = {board.read_file('/hello.lua')!r}")

        for entry in board.get_dir_content('/'):
            print(f"  {entry.type} {entry.size:>8} {entry.name}")

    print("\n[Done] Board detached automatically")


def example_notifications():
    """
    알림 수신 예제

    notify(event_name, json_payload) 형태의 함수를 넘기면
    리셋 / 런타임 에러 / 연결 이벤트를 받을 수 있음
    """
    import json
    import time
    from lua_board import BoardSession

    def notify(event_name: str, payload: str):
        fields = json.loads(payload)
        if event_name == 'boardRuntimeError':
            print(f"  [ERROR] {fields['where']}:{fields['line']} {fields['message']}")
        else:
            print(f"  [EVENT] {event_name}")

    with BoardSession(notifier=notify) as session:
        board = session.attach(default_port())
        if board is None:
            return

        # 런타임 에러가 나는 코드 실행
        board.run_code('/fail.lua', b'local x = nil\nx()\n')

        print("Waiting for board output (Ctrl+C to stop)")
        try:
            while session.active is not None:
                time.sleep(0.5)
        except KeyboardInterrupt:
            print("\nStopped")


def example_error_handling():
    """
    에러 처리 예제
    """
    from lua_board import (
        Board, BoardConfig,
        BoardError, CommunicationError, TimeoutError, ConnectionError, EchoMismatchError
    )

    config = BoardConfig(boot_timeout=10.0, strict_echo=True)

    try:
        with Board(default_port(), config=config) as board:
            board.send_command('print("hi")')

    except ConnectionError as e:
        print(f"Connection failed: {e}")
        print("Check if the serial port is correct and available")

    except TimeoutError as e:
        print(f"Timeout: {e}")
        print("Board did not finish booting in time")

    except EchoMismatchError as e:
        print(f"Protocol mismatch: {e}")

    except CommunicationError as e:
        print(f"Communication error: {e}")

    except BoardError as e:
        print(f"Board error: {e}")


def example_list_ports():
    """
    사용 가능한 시리얼 포트 목록 조회
    """
    from lua_board import Board

    ports = Board.list_ports()

    print("\nAvailable Serial Ports:")
    if ports:
        for port in ports:
            print(f"  - {port}")
    else:
        print("  No serial ports found")


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Lua RTOS Board Usage Examples')
    parser.add_argument(
        '--example',
        choices=['basic', 'notify', 'error', 'ports'],
        default='ports',
        help='Example to run (default: ports)'
    )

    args = parser.parse_args()

    if args.example == 'basic':
        example_with_session()
    elif args.example == 'notify':
        example_notifications()
    elif args.example == 'error':
        example_error_handling()
    elif args.example == 'ports':
        example_list_ports()
