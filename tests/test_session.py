"""
BoardSession Unit Tests

세션 핸들 테스트:
- 연결 성공 시에만 활성화
- 해제 (여러 번 호출)
- 보드 교체
- 포트 오류 시 활성 보드 제거
"""

import time
import pytest
import sys
import os
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import serial

from lua_board.session import BoardSession
from lua_board.config import BoardConfig
from lua_board.notifications import CollectingNotifier

from mock_serial import create_mock_serial


TEST_CONFIG = BoardConfig(
    settle_time=0.05,
    probe_interval=0.001,
    boot_timeout=1.0,
    response_timeout=1.0,
)


def wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def session(notifier):
    session = BoardSession(config=TEST_CONFIG, notifier=notifier)
    yield session
    session.detach()


class TestSessionAttach:
    """세션 연결 테스트"""

    def test_attach_installs_active_board(self, session, notifier):
        """부팅 → 실행 배너 후 활성 보드로 등록"""
        mock = create_mock_serial()
        with patch('lua_board.serial_comm.serial.Serial', return_value=mock):
            board = session.attach('MOCK')

        assert board is not None
        assert session.active is board
        assert board.is_attached
        assert notifier.names[-1] == 'boardAttached'

    def test_attach_open_failure(self, session):
        """포트 열기 실패 시 None, 활성 보드 없음"""
        with patch('lua_board.serial_comm.serial.Serial',
                   side_effect=serial.SerialException("busy")):
            assert session.attach('BUSY') is None

        assert session.active is None

    def test_attach_reset_failure(self, session, notifier):
        """부팅 타임아웃 시 None, 활성 보드 없음"""
        mock = create_mock_serial(silent=True)
        session.config = BoardConfig(**dict(TEST_CONFIG.to_dict(), boot_timeout=0.2))

        with patch('lua_board.serial_comm.serial.Serial', return_value=mock):
            assert session.attach('MOCK') is None

        assert session.active is None
        assert not mock.is_open
        assert 'boardAttached' not in notifier.names

    def test_attach_replaces_previous_board(self, session):
        """새 보드 연결 시 이전 보드 해제"""
        first, second = create_mock_serial(), create_mock_serial()

        with patch('lua_board.serial_comm.serial.Serial', side_effect=[first, second]):
            board1 = session.attach('MOCK1')
            board2 = session.attach('MOCK2')

        assert session.active is board2
        assert not board1.is_attached
        assert not first.is_open
        assert second.is_open


class TestSessionDetach:
    """세션 해제 테스트"""

    def test_detach_twice(self, session):
        """두 번 호출해도 활성 보드 참조 제거"""
        mock = create_mock_serial()
        with patch('lua_board.serial_comm.serial.Serial', return_value=mock):
            session.attach('MOCK')

        session.detach()
        session.detach()

        assert session.active is None
        assert not mock.is_open

    def test_detach_without_board(self, session):
        session.detach()
        assert session.active is None

    def test_context_manager(self, notifier):
        mock = create_mock_serial()
        with patch('lua_board.serial_comm.serial.Serial', return_value=mock):
            with BoardSession(config=TEST_CONFIG, notifier=notifier) as session:
                session.attach('MOCK')
                assert session.active is not None

        assert session.active is None
        assert not mock.is_open


class TestSessionConnectionLost:
    """포트 오류 테스트"""

    def test_connection_lost_clears_active(self, session):
        mock = create_mock_serial()
        with patch('lua_board.serial_comm.serial.Serial', return_value=mock):
            board = session.attach('MOCK')

        mock.fail()

        assert wait_until(lambda: session.active is None)
        assert not board.is_attached


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
