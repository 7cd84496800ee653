"""
Lua RTOS Console Protocol

장치측 와이어 규약:
- 프로브: 0x04 1바이트 전송 → 부팅 배너 1줄 응답
- 명령: <command>\\r\\n 전송 → 에코 1줄 → 응답 본문 → 프롬프트 (^/.*>.*$)
- 파일 쓰기 (push): 장치가 "C" 라인 전송 → 길이 1바이트 + 데이터, 길이 0이면 종료
- 파일 읽기 (pull): 호스트가 "C\\n" 전송 → 장치가 길이 1바이트 + 데이터, 길이 0이면 종료
"""

import re


# Control bytes
LF = 0x0A
CR = 0x0D
PROBE = 0x04

# Line terminators
COMMAND_EOL = '\r\n'    # send_command 용
TRANSFER_EOL = '\r'     # io.receive / io.send / dofile 실행 용

# Chunked transfer handshake
READY_MARKER = 'C'      # push: 장치 → 호스트 라인
READY_REQUEST = b'C\n'  # pull: 호스트 → 장치
END_OF_TRANSFER = 0

# Boot banners
BOOTING_BANNER = 'Lua RTOS-booting-ESP32'
BOOT_SCRIPTS_ABORTED_BANNER = 'Lua RTOS-boot-scripts-aborted-ESP32'
RUNNING_BANNER = 'Lua RTOS-running-ESP32'

BOOTING_BANNERS = frozenset({
    BOOTING_BANNER,
    BOOT_SCRIPTS_ABORTED_BANNER,
    RUNNING_BANNER,
})

PROMPT_PATTERN = re.compile(r'^/.*>.*$')


def is_prompt(line: str) -> bool:
    """Lua RTOS 쉘 프롬프트 라인인지 확인 (예: '/ > ')"""
    return PROMPT_PATTERN.match(line) is not None


def is_booting_banner(line: str) -> bool:
    return line in BOOTING_BANNERS


def is_running_banner(line: str) -> bool:
    return line == RUNNING_BANNER


def lua_quote(text: str) -> str:
    """Lua 문자열 리터럴 생성 (역슬래시/따옴표 이스케이프)"""
    escaped = text.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


def receive_command(path: str) -> str:
    """장치가 파일을 수신 (호스트 → 장치)"""
    return f'io.receive({lua_quote(path)})'


def send_command(path: str) -> str:
    """장치가 파일을 송신 (장치 → 호스트)"""
    return f'io.send({lua_quote(path)})'


def dofile_command(path: str) -> str:
    return f'dofile({lua_quote(path)})'


def list_command(path: str) -> str:
    return f'os.ls({lua_quote(path)})'


def next_chunk_length(total: int, offset: int, chunk_size: int) -> int:
    """
    다음 청크 길이 계산

    Args:
        total: 전체 데이터 길이
        offset: 현재까지 전송한 길이
        chunk_size: 최대 청크 크기 (1~255)

    Returns:
        min(chunk_size, 남은 길이), 모두 전송했으면 0
    """
    remaining = total - offset
    if remaining <= 0:
        return END_OF_TRANSFER
    return min(chunk_size, remaining)


def normalize_info(text: str) -> str:
    """
    보드 정보 텍스트의 후행 구분자 제거

    board-info.lua 가 만드는 ",}" / ",]" 를 "}" / "]" 로 정리
    """
    return text.replace(',}', '}').replace(',]', ']')


def decode_line(raw: bytes) -> str:
    """수신 라인 디코딩 (CR 제거 후 UTF-8, 깨진 바이트는 대체 문자)"""
    return raw.replace(b'\r', b'').decode('utf-8', errors='replace')
