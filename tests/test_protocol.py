"""
Protocol Unit Tests

프로토콜 관련 기능 테스트:
- 프롬프트 / 배너 판별
- 명령 문자열 생성
- 청크 길이 계산
- 보드 정보 정리
"""

import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from lua_board.protocol import (
    PROBE, READY_MARKER, READY_REQUEST, END_OF_TRANSFER,
    BOOTING_BANNER, BOOT_SCRIPTS_ABORTED_BANNER, RUNNING_BANNER,
    is_prompt, is_booting_banner, is_running_banner,
    lua_quote, receive_command, send_command, dofile_command, list_command,
    next_chunk_length, normalize_info, decode_line
)


class TestWireConstants:
    """와이어 상수 테스트"""

    def test_probe_byte(self):
        """프로브 바이트는 0x04"""
        assert PROBE == 0x04

    def test_ready_markers(self):
        """청크 준비 신호"""
        assert READY_MARKER == 'C'
        assert READY_REQUEST == b'C\n'
        assert END_OF_TRANSFER == 0


class TestPrompt:
    """프롬프트 판별 테스트"""

    @pytest.mark.parametrize('line', ['/ > ', '/>', '/sd/lib > ', '/ >print'])
    def test_prompt_lines(self, line):
        assert is_prompt(line)

    @pytest.mark.parametrize('line', ['', 'hello', 'a > b', ' / > ', '/no-marker'])
    def test_non_prompt_lines(self, line):
        assert not is_prompt(line)


class TestBanners:
    """부팅 배너 판별 테스트"""

    def test_booting_banners(self):
        """부팅 단계로 인정되는 배너 3종"""
        assert is_booting_banner(BOOTING_BANNER)
        assert is_booting_banner(BOOT_SCRIPTS_ABORTED_BANNER)
        assert is_booting_banner(RUNNING_BANNER)

    def test_running_banner(self):
        """실행 배너는 하나뿐"""
        assert is_running_banner('Lua RTOS-running-ESP32')
        assert not is_running_banner('Lua RTOS-booting-ESP32')
        assert not is_running_banner('Lua RTOS-boot-scripts-aborted-ESP32')

    def test_other_lines_rejected(self):
        assert not is_booting_banner('rst:0x1 (POWERON_RESET),boot:0x13')
        assert not is_running_banner('Lua RTOS-running-ESP32 ')


class TestCommands:
    """명령 문자열 생성 테스트"""

    def test_receive_command(self):
        assert receive_command('/main.lua') == 'io.receive("/main.lua")'

    def test_send_command(self):
        assert send_command('/main.lua') == 'io.send("/main.lua")'

    def test_dofile_command(self):
        assert dofile_command('/_info.lua') == 'dofile("/_info.lua")'

    def test_list_command(self):
        assert list_command('/') == 'os.ls("/")'

    def test_lua_quote_escapes(self):
        """따옴표 / 역슬래시 이스케이프"""
        assert lua_quote('a"b') == '"a\\"b"'
        assert lua_quote('a\\b') == '"a\\\\b"'


class TestChunkLength:
    """청크 길이 계산 테스트"""

    def test_full_chunk(self):
        assert next_chunk_length(1000, 0, 255) == 255

    def test_last_partial_chunk(self):
        assert next_chunk_length(1000, 765, 255) == 235

    def test_exact_boundary(self):
        """남은 길이가 청크 크기와 같을 때"""
        assert next_chunk_length(255, 0, 255) == 255
        assert next_chunk_length(255, 255, 255) == 0

    def test_exhausted(self):
        assert next_chunk_length(10, 10, 255) == END_OF_TRANSFER

    def test_empty_data(self):
        assert next_chunk_length(0, 0, 255) == 0


class TestInfoNormalize:
    """보드 정보 정리 테스트"""

    def test_trailing_separators_removed(self):
        raw = '{"os": "Lua RTOS", "modules": ["io","os",],}'
        assert normalize_info(raw) == '{"os": "Lua RTOS", "modules": ["io","os"]}'

    def test_clean_text_untouched(self):
        assert normalize_info('{"a": "1"}') == '{"a": "1"}'


class TestDecodeLine:
    """라인 디코딩 테스트"""

    def test_strips_carriage_return(self):
        assert decode_line(b'hello\r') == 'hello'

    def test_invalid_utf8_replaced(self):
        assert decode_line(b'a\xffb') == 'a�b'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
