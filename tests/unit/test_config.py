import pytest

from nim_proxy.core.config import Config, ConfigError
from nim_proxy.core.config.schema import DEFAULT_NVIDIA_BASE_URL, ConfigSchema
from nim_proxy.core.config.validation import load_env_var, validate_all


@pytest.mark.unit
class TestConfigFromEnv:
    def test_defaults(self):
        config = Config.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.log_level == "INFO"
        assert config.log_request_bodies is False
        assert config.nvidia_api_key is None
        assert config.nvidia_base_url == DEFAULT_NVIDIA_BASE_URL
        assert config.request_timeout == 120
        assert config.streaming_read_timeout is None
        assert not config.is_api_key_configured()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("NVIDIA_API_KEY", "nvapi-secret")
        monkeypatch.setenv("NVIDIA_BASE_URL", "http://localhost:9000/v1")
        monkeypatch.setenv("LOG_REQUEST_BODIES", "yes")
        monkeypatch.setenv("STREAMING_READ_TIMEOUT_SECONDS", "45.5")

        config = Config.from_env()

        assert config.port == 8080
        assert config.is_api_key_configured()
        assert config.nvidia_base_url == "http://localhost:9000/v1"
        assert config.log_request_bodies is True
        assert config.streaming_read_timeout == 45.5

    def test_blank_api_key_counts_as_missing(self, monkeypatch):
        monkeypatch.setenv("NVIDIA_API_KEY", "   ")
        assert not Config.from_env().is_api_key_configured()

    def test_invalid_port_raises_config_error(self, monkeypatch):
        monkeypatch.setenv("PORT", "not-a-port")

        with pytest.raises(ConfigError) as exc_info:
            Config.from_env()

        assert exc_info.value.env_var == "PORT"

    def test_out_of_range_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "70000")
        with pytest.raises(ConfigError):
            Config.from_env()


@pytest.mark.unit
class TestDisplay:
    def test_api_key_is_masked(self, monkeypatch):
        monkeypatch.setenv("NVIDIA_API_KEY", "nvapi-secret")
        config = Config.from_env()

        data = config.to_dict()

        assert "nvapi-secret" not in str(data)
        assert data["nvidia_api_key"].startswith("sha256:")

    def test_missing_key_display(self):
        assert Config().api_key_hash == "<not-set>"


@pytest.mark.unit
def test_log_level_accepts_trailing_comment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug  # verbose")
    assert load_env_var(ConfigSchema.LOG_LEVEL) == "debug  # verbose"


@pytest.mark.unit
def test_validate_all_collects_every_error(monkeypatch):
    monkeypatch.setenv("PORT", "0")
    monkeypatch.setenv("REQUEST_TIMEOUT", "abc")
    monkeypatch.setenv("NVIDIA_BASE_URL", "ftp://nim")

    errors = validate_all()

    assert {error.env_var for error in errors} == {"PORT", "REQUEST_TIMEOUT", "NVIDIA_BASE_URL"}


@pytest.mark.unit
def test_schema_describe_hides_nothing_but_callables():
    rows = {row["name"]: row for row in ConfigSchema.describe()}

    assert rows["NVIDIA_API_KEY"]["secret"] is True
    assert rows["PORT"]["type_hint"] == "int"
    assert "validator" not in rows["PORT"]
