from pathlib import Path

import pytest

from vsa.config import DEFAULT_CACHE_PATH, AppConfig, TeamsSettings
from vsa.errors import ConfigurationError


class TestFromEnv:
    def test_defaults(self):
        config = AppConfig.from_env({})
        assert config.summary() == {
            "scopestack": False,
            "openrouter": False,
            "fireflies": False,
            "teams": False,
            "webex": False,
        }
        assert config.scopestack.timeout == 10.0
        assert config.scopestack.base_url == "https://api.scopestack.io"
        assert config.cache.path == DEFAULT_CACHE_PATH

    def test_values(self):
        config = AppConfig.from_env({
            "SCOPESTACK_API_KEY": "ss",
            "OPENROUTER_API_KEY": "or",
            "VSA_DEFAULT_MODEL": "openai/gpt-4o",
            "VSA_HTTP_TIMEOUT": "5",
            "VSA_CACHE_PATH": "/tmp/vsa-cache.json",
        })
        assert config.scopestack.configured
        assert config.scopestack.timeout == 5.0
        assert config.fireflies.timeout == 5.0
        assert config.openrouter.model == "openai/gpt-4o"
        assert config.cache.path == Path("/tmp/vsa-cache.json")

    def test_empty_key_is_unset(self):
        assert AppConfig.from_env({"SCOPESTACK_API_KEY": ""}).scopestack.api_key is None

    @pytest.mark.parametrize("value", ["abc", "0", "-1"])
    def test_invalid_timeout(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            AppConfig.from_env({"VSA_HTTP_TIMEOUT": value})
        assert exc_info.value.setting == "http_timeout"


class TestFromYaml:
    def test_sections(self, tmp_path):
        path = tmp_path / "vsa.yaml"
        path.write_text(
            "scopestack:\n"
            "  api_key: ss\n"
            "  extra: ignored\n"
            "openrouter:\n"
            "  api_key: or\n"
            "  model: openai/gpt-4o\n"
            "teams: {client_id: cid, client_secret: secret, tenant_id: tenant}\n"
            "cache: {path: /tmp/vsa.json, enabled: false}\n"
            "http_timeout: 3\n",
            encoding="utf-8",
        )
        config = AppConfig.from_yaml(path)

        assert config.scopestack.api_key == "ss"
        assert config.scopestack.timeout == 3.0
        assert config.teams.configured
        assert config.teams.timeout == 3.0
        assert config.openrouter.model == "openai/gpt-4o"
        assert config.openrouter.timeout == 60.0
        assert config.cache.path == Path("/tmp/vsa.json")
        assert config.cache.enabled is False
        assert config.webex.configured is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            AppConfig.from_yaml(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            AppConfig.from_yaml(path)


def test_teams_needs_every_credential():
    assert TeamsSettings(client_id="cid", client_secret="secret").configured is False
    assert TeamsSettings(client_id="cid", client_secret="secret", tenant_id="t").configured is True
