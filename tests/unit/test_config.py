"""Unit tests for ClipscribeConfig."""

import pytest

from clipscribe.config import ClipscribeConfig
from clipscribe.errors import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "clipscribe.yaml"
    path.write_text(
        "gemini:\n"
        "  model: gemini-2.5-pro\n"
        "transcription:\n"
        "  reformat: false\n"
        "logging:\n"
        "  file_path: logs/app.log\n"
    )
    return path


@pytest.mark.unit
class TestClipscribeConfig:

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = ClipscribeConfig()

        assert config.config_file is None
        assert config.get('gemini.model') == 'gemini-2.5-flash'
        assert config.get('transcription.timeout_seconds') == 120.0
        assert config.get('clipboard.ack_seconds') == 2.0
        assert config.get('missing.key', 'fallback') == 'fallback'

    def test_file_overrides_defaults(self, config_file, tmp_path):
        config = ClipscribeConfig(str(config_file))

        assert config.get('gemini.model') == 'gemini-2.5-pro'
        assert config.get('transcription.reformat') is False
        # Untouched keys keep their defaults
        assert config.get('gemini.api_key_env') == 'API_KEY'
        assert config.get('logging.file_path') == str(tmp_path / "logs" / "app.log")

    def test_picks_up_file_in_working_directory(self, config_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = ClipscribeConfig()

        assert config.config_file == tmp_path / "clipscribe.yaml"
        assert config.get('gemini.model') == 'gemini-2.5-pro'

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ClipscribeConfig(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("gemini: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ClipscribeConfig(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            ClipscribeConfig(str(path))

    def test_set(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = ClipscribeConfig()

        config.set('gemini.model', 'gemini-x')
        config.set('new.section.value', 3)

        assert config.get('gemini.model') == 'gemini-x'
        assert config.get('new.section.value') == 3

    def test_defaults_are_not_shared(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        ClipscribeConfig().set('gemini.model', 'changed')

        assert ClipscribeConfig().get('gemini.model') == 'gemini-2.5-flash'


@pytest.mark.unit
class TestApiKey:

    def test_missing_key(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = ClipscribeConfig()

        assert config.find_api_key() is None
        with pytest.raises(ConfigurationError, match="API_KEY environment variable is not set"):
            config.get_api_key()

    def test_api_key_wins_over_fallback(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("API_KEY", "primary")
        monkeypatch.setenv("GEMINI_API_KEY", "secondary")

        assert ClipscribeConfig().get_api_key() == "primary"

    def test_blank_key_is_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("API_KEY", "   ")

        assert ClipscribeConfig().find_api_key() is None

    def test_custom_env_name(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("gemini:\n  api_key_env: MY_KEY\n")
        monkeypatch.setenv("MY_KEY", "custom")

        assert ClipscribeConfig(str(path)).get_api_key() == "custom"


@pytest.mark.unit
class TestEmptySections:

    def test_empty_logging_section_keeps_defaults(self, tmp_path):
        path = tmp_path / "clipscribe.yaml"
        path.write_text("logging:\ngemini:\n  model: gemini-2.5-pro\n")

        config = ClipscribeConfig(str(path))

        assert config.get('gemini.model') == 'gemini-2.5-pro'
        assert config.get('logging.level') == 'INFO'
        assert config.get('logging.file_path').endswith("clipscribe.log")
