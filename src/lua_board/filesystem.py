"""
File Transfer Module

보드 파일시스템 파일 송수신 (청크 단위)
- io.receive("<path>"): 호스트 → 보드 (push)
- io.send("<path>"):    보드 → 호스트 (pull)
- os.ls("<path>"):      디렉토리 목록 (탭 구분 4필드)
"""

import json
import logging
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, TYPE_CHECKING

from .protocol import (
    TRANSFER_EOL, READY_MARKER, READY_REQUEST, END_OF_TRANSFER,
    is_prompt, receive_command, send_command, list_command, next_chunk_length
)

if TYPE_CHECKING:
    from .board import Board

logger = logging.getLogger(__name__)


@dataclass
class DirEntry:
    """디렉토리 항목 (os.ls 응답 한 줄)"""
    type: str   # 'f' 파일, 'd' 디렉토리
    size: str
    date: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def parse_dir_listing(body: str) -> List[DirEntry]:
    """
    os.ls 응답 파싱

    필드가 정확히 4개인 라인만 사용, 나머지는 무시

    Args:
        body: send_command 응답 본문

    Returns:
        DirEntry 목록
    """
    entries = []
    for line in body.split('\n'):
        fields = line.replace('\r', '').split('\t')
        if len(fields) != 4:
            if line.strip():
                logger.debug(f"Skipping malformed listing line: {line!r}")
            continue
        entries.append(DirEntry(*fields))
    return entries


def dir_content_json(entries: List[DirEntry]) -> str:
    """DirEntry 목록을 JSON 배열 문자열로 변환"""
    return json.dumps([entry.to_dict() for entry in entries], ensure_ascii=False)


class FileTransfer:
    """
    파일 송수신 클래스

    사용 예:
        fs = FileTransfer(board)
        fs.write_file('/main.lua', b'print("hello")')
        data = fs.read_file('/main.lua')
        for entry in fs.get_dir_content('/'):
            print(entry.name, entry.size)
    """

    def __init__(self, board: 'Board'):
        """
        Args:
            board: 연결된 Board 인스턴스
        """
        self._board = board

    def write_file(self, path: str, data: bytes) -> bool:
        """
        파일 쓰기 (호스트 → 보드)

        보드가 "C" 라인으로 준비를 알리면 길이 1바이트 + 데이터 전송,
        길이 0 전송으로 종료

        Args:
            path: 보드 파일 경로
            data: 파일 내용

        Returns:
            성공 시 True, 에코 불일치 또는 장치측 수신 실패 시 False

        Raises:
            EchoMismatchError: strict_echo 설정 시 에코 불일치
            TimeoutError: 보드 응답 없음
        """
        board = self._board
        command = receive_command(path)
        timeout = board.config.response_timeout

        with board.lock:
            board.write((command + TRANSFER_EOL).encode('utf-8'))
            if not board.verify_echo(command, timeout):
                return False

            offset = 0
            while True:
                line = board.read_line(timeout=timeout)
                if is_prompt(line):
                    # io.receive 가 실패하면 장치는 에러 출력 후 쉘로 복귀
                    logger.error(f"Device aborted receive of {path}")
                    board.consume()
                    return False
                if line != READY_MARKER:
                    logger.debug(f"Waiting for chunk request, got {line!r}")
                    continue

                length = next_chunk_length(len(data), offset, board.chunk_size)
                board.write(bytes([length]))
                if length == END_OF_TRANSFER:
                    break

                board.write(data[offset:offset + length])
                offset += length

            board.consume()

        logger.info(f"Wrote {len(data)} bytes to {path}")
        return True

    def read_file(self, path: str) -> Optional[bytes]:
        """
        파일 읽기 (보드 → 호스트)

        "C\\n" 을 보내 청크를 요청하고, 길이 0을 받으면 종료

        Args:
            path: 보드 파일 경로

        Returns:
            파일 내용, 에코 불일치 시 None

        Raises:
            EchoMismatchError: strict_echo 설정 시 에코 불일치
            TimeoutError: 보드 응답 없음
        """
        board = self._board
        command = send_command(path)
        timeout = board.config.response_timeout
        buffer = bytearray()

        with board.lock:
            board.write((command + TRANSFER_EOL).encode('utf-8'))
            if not board.verify_echo(command, timeout):
                return None

            while True:
                board.write(READY_REQUEST)

                length = board.read_byte(timeout=timeout)
                if length == END_OF_TRANSFER:
                    break

                for _ in range(length):
                    buffer.append(board.read_byte(timeout=timeout))

            board.consume()

        logger.info(f"Read {len(buffer)} bytes from {path}")
        return bytes(buffer)

    def get_dir_content(self, path: str) -> List[DirEntry]:
        """
        디렉토리 목록 조회

        Args:
            path: 보드 디렉토리 경로

        Returns:
            DirEntry 목록 (에코 불일치 시 빈 목록)
        """
        body = self._board.send_command(list_command(path))
        entries = parse_dir_listing(body)
        logger.debug(f"{path}: {len(entries)} entries")
        return entries
