"""
Board Session

한 번에 하나의 활성 보드를 관리하는 세션 핸들
- attach(): 이전 보드를 해제하고 새 보드를 연결, 성공 시에만 활성화
- detach(): 활성 보드 해제 (여러 번 호출해도 안전)
- 포트 오류로 연결이 끊기면 활성 보드 참조를 자동으로 제거
"""

import logging
import threading
from typing import Optional

from .board import Board
from .config import BoardConfig
from .exceptions import BoardError
from .notifications import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)


class BoardSession:
    """
    보드 세션 관리 클래스

    사용 예:
        session = BoardSession(notifier=my_notify)
        board = session.attach('/dev/ttyUSB0')
        if board is not None:
            print(board.get_dir_content('/'))
        session.detach()
    """

    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        notifier: Optional[Notifier] = None
    ):
        """
        Args:
            config: 새 보드에 적용할 설정
            notifier: 알림 수신자 (None이면 로그 출력)
        """
        self.config = config or BoardConfig()
        self.notifier: Notifier = notifier or LoggingNotifier()
        self._active: Optional[Board] = None
        self._lock = threading.Lock()

    @property
    def active(self) -> Optional[Board]:
        """현재 활성 보드 (없으면 None)"""
        return self._active

    def attach(self, port: str) -> Optional[Board]:
        """
        보드 연결

        Args:
            port: 시리얼 포트 이름

        Returns:
            연결된 Board, 실패 시 None
        """
        self.detach()

        board = Board(port, config=self.config, notifier=self.notifier)
        try:
            board.attach()
        except BoardError as e:
            logger.error(f"Cannot attach board on {port}: {e}")
            return None

        board.on_connection_lost = self._connection_lost
        with self._lock:
            self._active = board
        return board

    def detach(self) -> None:
        """활성 보드 해제"""
        with self._lock:
            board, self._active = self._active, None

        if board is not None:
            board.detach()

    def _connection_lost(self, board: Board) -> None:
        with self._lock:
            if self._active is board:
                self._active = None
                logger.warning(f"Active board on {board.port} lost")

    def __enter__(self) -> 'BoardSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.detach()
