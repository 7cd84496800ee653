"""
Boot Sequencer

제어선 토글로 보드를 리셋하고 부팅 완료까지 추적

상태 전이: RESETTING → BOOTING → RUNNING
- 10ms 마다 0x04 프로브를 보내고 응답 1줄을 배너와 비교
- 각 폴링 단계는 boot_timeout 으로 제한 (초과 시 TimeoutError)
"""

import logging
import time
from enum import Enum
from typing import Callable, Optional, TYPE_CHECKING

from .exceptions import TimeoutError
from .protocol import PROBE, is_booting_banner, is_running_banner

if TYPE_CHECKING:
    from .board import Board

logger = logging.getLogger(__name__)


# EN 라인을 Low 로 유지하는 시간 (초)
RESET_HOLD_TIME = 0.1


class BootState(Enum):
    """부팅 상태"""
    RESETTING = 'RESETTING'
    BOOTING = 'BOOTING'
    RUNNING = 'RUNNING'


class BootSequencer:
    """
    부팅 상태 머신

    사용 예:
        sequencer = BootSequencer(board)
        sequencer.run()
        assert sequencer.state == BootState.RUNNING
    """

    def __init__(self, board: 'Board'):
        """
        Args:
            board: 연결된 Board 인스턴스
        """
        self._board = board
        self.state: Optional[BootState] = None

    def run(self) -> BootState:
        """
        리셋 후 RUNNING 상태까지 대기

        Returns:
            BootState.RUNNING

        Raises:
            TimeoutError: 제한 시간 내 배너를 받지 못한 경우
            CommunicationError: 포트 오류 시
        """
        self._set_state(BootState.RESETTING)
        self._pulse_reset()

        self._wait_for(is_booting_banner, BootState.BOOTING)
        logger.info("board is booting ...")

        self._wait_for(is_running_banner, BootState.RUNNING)
        logger.info("board is running ...")

        # 부팅 배너 잔여물 폐기
        self._board.consume()
        return self.state

    def _set_state(self, state: BootState) -> None:
        logger.debug(f"Boot state: {self.state.name if self.state else '-'} -> {state.name}")
        self.state = state

    def _pulse_reset(self) -> None:
        """EN 라인 펄스: RTS 활성으로 리셋 유지 → 해제"""
        connection = self._board.connection
        baudrate = self._board.config.baudrate
        connection.apply(baudrate, dtr=False, rts=True)
        time.sleep(RESET_HOLD_TIME)
        connection.apply(baudrate, dtr=False, rts=False)

    def _probe(self, timeout: Optional[float]) -> str:
        time.sleep(self._board.config.probe_interval)
        self._board.write(bytes([PROBE]))
        return self._board.read_line(timeout=timeout)

    def _wait_for(self, accept: Callable[[str], bool], target: BootState) -> None:
        boot_timeout = self._board.config.boot_timeout
        deadline = None if boot_timeout is None else time.monotonic() + boot_timeout

        while True:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TimeoutError(
                        f"Board did not reach {target.name} within {boot_timeout:.1f}s"
                    )

            try:
                line = self._probe(remaining)
            except TimeoutError:
                raise TimeoutError(
                    f"Board did not reach {target.name} within {boot_timeout:.1f}s"
                )

            if accept(line):
                self._set_state(target)
                return

            logger.debug(f"Probe reply ignored: {line!r}")
