"""Tests for withyou/config.py"""

import pytest

from withyou.config import (
    DEFAULT_BASE_URL,
    BackendConfig,
    RegistrationConfig,
    WithYouConfig,
    get_config_path,
    load_config,
    normalize_base_url,
)


class TestNormalizeBaseUrl:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("https://api.example.com", "https://api.example.com"),
            ("https://api.example.com/", "https://api.example.com"),
            ("  http://localhost:8080/  ", "http://localhost:8080"),
            ("api.example.com", "https://api.example.com"),
            ("api.example.com/", "https://api.example.com"),
            ("https://api.example.com/prefix/", "https://api.example.com/prefix"),
        ],
    )
    def test_usable(self, raw, expected):
        assert normalize_base_url(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [None, "", "   ", "https:", "http:", "https:/", "https://", "ftp://files.example.com"],
    )
    def test_unusable(self, raw):
        assert normalize_base_url(raw) is None


class TestSections:
    def test_defaults(self):
        config = WithYouConfig()
        assert config.backend.base_url == DEFAULT_BASE_URL
        assert config.backend.api_key is None
        assert config.registration.retry_delays == [0.5, 1.5, 3.0]
        assert config.registration.failure_cooldown_seconds == 60
        assert config.push.authorization_status == "authorized"
        assert config.runtime.debug is False
        assert config.profile.morning_hour == 9

    def test_bad_base_url_falls_back(self):
        assert BackendConfig(base_url="ftp://nope").base_url == DEFAULT_BASE_URL
        assert BackendConfig(base_url="").base_url == DEFAULT_BASE_URL

    def test_blank_api_key_is_none(self):
        assert BackendConfig(api_key="   ").api_key is None
        assert BackendConfig(api_key=" abc ").api_key == "abc"

    def test_empty_retry_schedule_rejected(self):
        with pytest.raises(ValueError):
            RegistrationConfig(retry_delays=[])

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            RegistrationConfig(retry_delays=[0.5, -1])


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")
        assert config.backend.base_url == DEFAULT_BASE_URL

    def test_reads_yaml(self, tmp_path):
        path = tmp_path / "withyou.yaml"
        path.write_text(
            "backend:\n"
            "  base_url: staging.example.com/\n"
            "  api_key: abc\n"
            "registration:\n"
            "  retry_delays: [1, 2]\n"
            "profile:\n"
            "  evening_hour: 21\n"
        )
        config = load_config(path)

        assert config.backend.base_url == "https://staging.example.com"
        assert config.backend.api_key == "abc"
        assert config.registration.retry_delays == [1.0, 2.0]
        assert config.profile.evening_hour == 21

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "withyou.yaml"
        path.write_text("backend:\n  base_url: https://file.example.com\n")
        monkeypatch.setenv("WITHYOU_API_BASE_URL", "env.example.com")
        monkeypatch.setenv("WITHYOU_API_KEY", "from-env")
        monkeypatch.setenv("WITHYOU_TIMEZONE", "Asia/Tokyo")
        monkeypatch.setenv("WITHYOU_APNS_ENVIRONMENT", "sandbox")
        monkeypatch.setenv("WITHYOU_DEBUG", "true")

        config = load_config(path)

        assert config.backend.base_url == "https://env.example.com"
        assert config.backend.api_key == "from-env"
        assert config.runtime.timezone == "Asia/Tokyo"
        assert config.runtime.apns_environment == "sandbox"
        assert config.runtime.debug is True

    def test_invalid_file_falls_back_to_defaults(self, tmp_path, monkeypatch):
        path = tmp_path / "withyou.yaml"
        path.write_text("registration:\n  retry_delays: []\n")
        monkeypatch.setenv("WITHYOU_API_KEY", "still-applied")

        config = load_config(path)

        assert config.registration.retry_delays == [0.5, 1.5, 3.0]
        assert config.backend.api_key == "still-applied"

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "withyou.yaml"
        path.write_text("- just\n- a list\n")
        assert load_config(path) == WithYouConfig()

    def test_bad_env_override_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WITHYOU_DEBUG", "sometimes")
        config = load_config(tmp_path / "absent.yaml")
        assert config.runtime.debug is False

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("push:\n  authorization_status: denied\n")
        monkeypatch.setenv("WITHYOU_CONFIG_PATH", str(path))

        assert get_config_path() == path
        assert load_config().push.authorization_status == "denied"

    def test_shipped_config_loads(self):
        config = load_config()
        assert config.backend.base_url == DEFAULT_BASE_URL
        assert config.backend.api_key is None
        assert config.runtime.timezone is None
