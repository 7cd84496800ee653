"""
Lua RTOS Board Custom Exceptions
"""


class BoardError(Exception):
    """보드 통신 기본 예외"""
    pass


class CommunicationError(BoardError):
    """통신 오류 (전송/수신 오류, 연결 끊김)"""
    pass


class ConnectionError(BoardError):
    """시리얼 포트 연결 오류"""
    pass


class TimeoutError(BoardError):
    """응답 타임아웃 (보드 무응답)"""
    pass


class ResponseError(BoardError):
    """응답 처리 오류"""
    pass


class EchoMismatchError(ResponseError):
    """명령 에코가 전송한 명령과 다름"""

    def __init__(self, expected: str, received: str):
        super().__init__(f"Echo mismatch: sent {expected!r}, got {received!r}")
        self.expected = expected
        self.received = received


class ConfigError(BoardError):
    """설정 파일/값 오류"""
    pass
