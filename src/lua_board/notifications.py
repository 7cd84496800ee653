"""
Board Notifications

보드에서 자발적으로 출력된 데이터(리셋, 런타임 에러)와
연결 이벤트를 외부 소비자에게 전달

Notifier 규약: notify(event_name: str, json_payload: str)
- fire-and-forget, 반환값 사용하지 않음
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


Notifier = Callable[[str, str], None]


class Event(Enum):
    """알림 이벤트 이름"""
    POWER_ON_RESET = 'boardPowerOnReset'
    SOFTWARE_RESET = 'boardSoftwareReset'
    DEEP_SLEEP_RESET = 'boardDeepSleepReset'
    RUNTIME_ERROR = 'boardRuntimeError'
    ATTACHED = 'boardAttached'


@dataclass
class Notification:
    """알림 이벤트 + 평면 key/value 페이로드"""
    event: Event
    payload: Dict[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.event.value

    def to_json(self) -> str:
        """페이로드를 JSON 문자열로 변환 (보드 텍스트의 따옴표도 안전하게 이스케이프)"""
        return json.dumps(self.payload, ensure_ascii=False)


def dispatch(notifier: Notifier, notification: Notification) -> None:
    """
    알림 전송

    Notifier 예외는 로그만 남기고 호출자(Inspector)로 전파하지 않음
    """
    try:
        notifier(notification.name, notification.to_json())
    except Exception:
        logger.exception(f"Notifier failed for {notification.name}")


class LoggingNotifier:
    """로그로만 알림을 출력하는 기본 Notifier"""

    def __call__(self, event_name: str, json_payload: str) -> None:
        if event_name == Event.RUNTIME_ERROR.value:
            logger.warning(f"{event_name}: {json_payload}")
        else:
            logger.info(f"{event_name}: {json_payload}")


class CollectingNotifier:
    """
    수신한 알림을 메모리에 보관하는 Notifier

    사용 예:
        notifier = CollectingNotifier()
        session = BoardSession(notifier=notifier)
        ...
        print(notifier.names)
    """

    def __init__(self):
        self.events: List[Tuple[str, str]] = []

    def __call__(self, event_name: str, json_payload: str) -> None:
        self.events.append((event_name, json_payload))

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def payloads(self, event_name: str) -> List[Dict[str, str]]:
        """특정 이벤트의 페이로드 목록 (JSON 디코딩)"""
        return [json.loads(payload) for name, payload in self.events if name == event_name]

    def clear(self) -> None:
        self.events.clear()
