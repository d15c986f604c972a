"""Unit tests for the YAML configuration loader."""

from pathlib import Path

import pytest

from ieltsprep.config import DEFAULTS, IeltsPrepConfig


@pytest.mark.unit
class TestIeltsPrepConfig:

    def test_defaults_without_file(self, temp_data_dir, monkeypatch):
        monkeypatch.chdir(temp_data_dir)
        config = IeltsPrepConfig()

        assert config.config_file is None
        assert config.get('api.base_url') == DEFAULTS['api']['base_url']
        assert config.get('audio.chunk_size') == 1600
        assert config.get('practice.countdown_minutes') == 2

    def test_file_overrides_and_keeps_defaults(self, config_file):
        config = IeltsPrepConfig(config_file)

        assert config.get('api.timeout_seconds') == 5
        assert config.get('audio.sample_rate') == 16000
        assert config.get_api_base_url() == "http://backend.test:8080"

    def test_relative_paths_resolve_against_config_dir(self, config_file):
        config = IeltsPrepConfig(config_file)
        config_dir = Path(config_file).parent

        assert config.get_data_directory() == str((config_dir / "userdata").absolute())
        assert config.get('logging.file_path') == str(config_dir / "logs/test.log")

    def test_missing_explicit_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            IeltsPrepConfig(str(Path(temp_data_dir) / "nope.yaml"))

    @pytest.mark.parametrize("content", ["", "- just\n- a list\n", "api: [unclosed\n"])
    def test_bad_files(self, temp_data_dir, content):
        path = Path(temp_data_dir) / "bad.yaml"
        path.write_text(content)
        with pytest.raises(ValueError):
            IeltsPrepConfig(str(path))

    def test_get_and_set_dot_paths(self, config_file):
        config = IeltsPrepConfig(config_file)

        assert config.get('api.missing', 'fallback') == 'fallback'
        config.set('practice.countdown_minutes', 5)
        config.set('new.section.key', True)
        assert config.get('practice.countdown_minutes') == 5
        assert config.get('new.section.key') is True

    def test_missing_base_url(self, config_file):
        config = IeltsPrepConfig(config_file)
        config.set('api.base_url', '')
        with pytest.raises(ValueError):
            config.get_api_base_url()
