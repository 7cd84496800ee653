"""
BoardConfig Unit Tests

설정 테스트:
- 기본값
- 값 검증
- YAML 로드
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from lua_board.config import BoardConfig, load_config, DEFAULT_INFO_SCRIPT
from lua_board.exceptions import ConfigError


class TestDefaults:
    """기본값 테스트"""

    def test_default_values(self):
        config = BoardConfig()

        assert config.baudrate == 115200
        assert config.chunk_size == 255
        assert config.queue_size == 10240
        assert config.probe_interval == 0.01
        assert config.settle_time == 0.1
        assert config.strict_echo is False
        assert config.remote_info_path == '/_info.lua'
        assert config.autorun_path == '/autorun.lua'

    def test_default_info_script_is_packaged(self):
        """패키지에 포함된 보드 정보 스크립트"""
        config = BoardConfig()

        assert config.info_script_path == DEFAULT_INFO_SCRIPT
        assert DEFAULT_INFO_SCRIPT.exists()

    def test_custom_info_script(self, tmp_path):
        script = tmp_path / 'info.lua'
        config = BoardConfig(info_script=str(script))
        assert config.info_script_path == script


class TestValidation:
    """값 검증 테스트"""

    @pytest.mark.parametrize('size', [0, 256, -1])
    def test_invalid_chunk_size(self, size):
        """길이 바이트 1개 범위 (1~255)"""
        with pytest.raises(ConfigError):
            BoardConfig(chunk_size=size)

    def test_invalid_timeout(self):
        with pytest.raises(ConfigError):
            BoardConfig(boot_timeout=0)

    def test_null_timeout_allowed(self):
        """None 은 무한 대기"""
        config = BoardConfig(boot_timeout=None, response_timeout=None)
        assert config.boot_timeout is None

    def test_unknown_key(self):
        with pytest.raises(ConfigError) as exc_info:
            BoardConfig.from_dict({'chunksize': 100})
        assert 'chunksize' in str(exc_info.value)

    def test_wrong_type(self):
        with pytest.raises(ConfigError):
            BoardConfig.from_dict({'chunk_size': 'big'})


class TestLoadConfig:
    """YAML 로드 테스트"""

    def test_load_board_section(self, tmp_path):
        path = tmp_path / 'board.yaml'
        path.write_text(
            "board:\n"
            "  chunk_size: 128\n"
            "  boot_timeout: 5.0\n"
            "  strict_echo: true\n",
            encoding='utf-8'
        )

        config = load_config(path)

        assert config.chunk_size == 128
        assert config.boot_timeout == 5.0
        assert config.strict_echo is True
        assert config.baudrate == 115200

    def test_load_flat_mapping(self, tmp_path):
        path = tmp_path / 'board.yaml'
        path.write_text("response_timeout: null\n", encoding='utf-8')

        assert load_config(path).response_timeout is None

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text("", encoding='utf-8')

        assert load_config(path) == BoardConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / 'missing.yaml')

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text("board: [unclosed\n", encoding='utf-8')

        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / 'list.yaml'
        path.write_text("- 1\n- 2\n", encoding='utf-8')

        with pytest.raises(ConfigError):
            load_config(path)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
