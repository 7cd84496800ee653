"""
Board Configuration

보드 드라이버 설정 (YAML 파일 또는 기본값)

예시 (board.yaml):
    board:
      baudrate: 115200
      chunk_size: 255
      boot_timeout: 30.0
      response_timeout: 10.0
      strict_echo: false
"""

import logging
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)


# Lua RTOS 콘솔 기본값
DEFAULT_BAUDRATE = 115200
DEFAULT_CHUNK_SIZE = 255       # 길이 바이트 1개로 표현 가능한 최대값
DEFAULT_QUEUE_SIZE = 10 * 1024
DEFAULT_READ_TIMEOUT = 0.1     # seconds, Inspector 폴링 주기
DEFAULT_WRITE_TIMEOUT = 1.0    # seconds

# 패키지에 포함된 보드 정보 스크립트
DEFAULT_INFO_SCRIPT = Path(__file__).parent / 'lua' / 'board-info.lua'


@dataclass
class BoardConfig:
    """보드 세션 설정"""
    baudrate: int = DEFAULT_BAUDRATE
    chunk_size: int = DEFAULT_CHUNK_SIZE
    queue_size: int = DEFAULT_QUEUE_SIZE
    read_timeout: float = DEFAULT_READ_TIMEOUT
    write_timeout: float = DEFAULT_WRITE_TIMEOUT
    probe_interval: float = 0.01             # 부팅 프로브 간격 (10ms)
    settle_time: float = 0.1                 # 큐 비우기 전 대기 (100ms)
    boot_timeout: Optional[float] = 30.0     # 부팅/실행 폴링 각각의 제한 시간
    response_timeout: Optional[float] = 10.0 # 응답 라인 1개당 제한 시간, None이면 무한 대기
    strict_echo: bool = False                # True면 에코 불일치 시 EchoMismatchError
    info_script: Optional[str] = None        # None이면 DEFAULT_INFO_SCRIPT
    remote_info_path: str = '/_info.lua'
    autorun_path: str = '/autorun.lua'

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        설정값 검증

        Raises:
            ConfigError: 범위를 벗어난 값이 있을 때
        """
        if not 1 <= self.chunk_size <= 255:
            raise ConfigError(f"chunk_size must be in 1..255, got {self.chunk_size}")
        if self.baudrate <= 0:
            raise ConfigError(f"Invalid baudrate: {self.baudrate}")
        if self.queue_size <= 0:
            raise ConfigError(f"Invalid queue_size: {self.queue_size}")
        for name in ('read_timeout', 'write_timeout', 'probe_interval', 'settle_time'):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        for name in ('boot_timeout', 'response_timeout'):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ConfigError(f"{name} must be positive or null")

    @property
    def info_script_path(self) -> Path:
        """로컬 보드 정보 스크립트 경로"""
        if self.info_script:
            return Path(self.info_script)
        return DEFAULT_INFO_SCRIPT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BoardConfig':
        """
        딕셔너리로부터 설정 생성

        Args:
            data: 설정 딕셔너리 (알 수 없는 키는 오류)

        Raises:
            ConfigError: 알 수 없는 키 또는 잘못된 값
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(f"Invalid config: {e}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Union[str, Path]) -> BoardConfig:
    """
    YAML 설정 파일 로드

    최상위에 'board' 키가 있으면 그 아래 값을 사용

    Args:
        path: YAML 파일 경로

    Returns:
        BoardConfig 객체

    Raises:
        ConfigError: 파일 읽기/파싱 실패 시
    """
    path = Path(path)
    try:
        with path.open('r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")

    if 'board' in data:
        data = data['board'] or {}
        if not isinstance(data, dict):
            raise ConfigError(f"'board' section must be a mapping: {path}")

    config = BoardConfig.from_dict(data)
    logger.debug(f"Loaded config from {path}: {config}")
    return config
