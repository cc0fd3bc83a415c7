import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from config.config import (
    ENV_OVERRIDES,
    EnoviaConfig,
    _deep_merge,
    _expand_env_vars,
    _flatten,
    load_config,
    load_yaml,
)

VALID = {
    "enovia": {
        "passport_url": "https://plm.example.com/3dpassport/",
        "service_url": "https://plm.example.com/enovia",
        "security_context": "VPLMProjectLeader.Company Name.Default",
        "auth": {"mode": "user", "username": "jdoe", "password": "pw"},
    }
}


@pytest.fixture(autouse=True)
def clean_env():
    """Keep ENOVIA_* variables from the developer's shell out of the tests."""
    env = {k: v for k, v in os.environ.items() if k not in ENV_OVERRIDES}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def write_config(tmp_path):
    def _write(data):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(data))
        return path

    return _write


# =========================================================================
# load_yaml
# =========================================================================


class TestLoadYaml:
    def test_returns_empty_dict_for_nonexistent_file(self):
        assert load_yaml(Path("/nonexistent/path/config.yaml")) == {}

    def test_returns_empty_dict_for_empty_file(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        assert load_yaml(config_file) == {}


# =========================================================================
# _expand_env_vars
# =========================================================================


class TestExpandEnvVars:
    def test_expands_set_variable(self):
        with patch.dict(os.environ, {"PLM_HOST": "plm.example.com"}):
            assert _expand_env_vars("https://${PLM_HOST}/x") == "https://plm.example.com/x"

    def test_uses_default_when_unset(self):
        assert _expand_env_vars("${MISSING_VAR:-fallback}") == "fallback"

    def test_keeps_placeholder_when_unset_without_default(self):
        assert _expand_env_vars("${MISSING_VAR}") == "${MISSING_VAR}"

    def test_recurses_into_containers(self):
        with patch.dict(os.environ, {"A": "1"}):
            assert _expand_env_vars({"k": ["${A}", {"n": "${A}"}], "i": 3}) == {
                "k": ["1", {"n": "1"}],
                "i": 3,
            }


# =========================================================================
# helpers
# =========================================================================


class TestHelpers:
    def test_deep_merge(self):
        assert _deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}}) == {"a": {"b": 1, "c": 3}}

    def test_flatten_lifts_auth_section(self):
        flat = _flatten({"tenant": "T1", "auth": {"mode": "batch", "service_name": "svc"}})
        assert flat == {"tenant": "T1", "auth_mode": "batch", "service_name": "svc"}


# =========================================================================
# load_config
# =========================================================================


class TestLoadConfig:
    def test_loads_user_config(self, write_config):
        config = load_config(write_config(VALID))

        assert config.passport_url == "https://plm.example.com/3dpassport"
        assert config.service_url == "https://plm.example.com/enovia"
        assert config.auth_mode == "user"
        assert config.username == "jdoe"
        assert config.csrf_validity_minutes == 55
        assert config.timeout_seconds == 30
        assert config.tenant is None
        assert config.remember_me is False

    def test_loads_batch_config(self, write_config):
        data = {
            "enovia": {
                "passport_url": "https://plm.example.com/3dpassport",
                "service_url": "https://plm.example.com/enovia",
                "tenant": "R1132100000001",
                "auth": {
                    "mode": "batch",
                    "service_name": "svc",
                    "service_secret": "s3cret",
                    "on_behalf_of": "jdoe",
                },
            }
        }

        config = load_config(write_config(data))

        assert config.auth_mode == "batch"
        assert config.on_behalf_of == "jdoe"
        assert config.tenant == "R1132100000001"

    def test_env_overrides_yaml(self, write_config):
        with patch.dict(
            os.environ,
            {"ENOVIA_TENANT": "T9", "ENOVIA_CSRF_VALIDITY_MINUTES": "10", "ENOVIA_REMEMBER_ME": "true"},
        ):
            config = load_config(write_config(VALID))

        assert config.tenant == "T9"
        assert config.csrf_validity_minutes == 10
        assert config.remember_me is True

    def test_overrides_win_over_env(self, write_config):
        with patch.dict(os.environ, {"ENOVIA_USERNAME": "from_env"}):
            config = load_config(write_config(VALID), overrides={"username": "from_override"})

        assert config.username == "from_override"

    def test_expands_variables_in_yaml(self, write_config):
        data = {"enovia": {**VALID["enovia"], "auth": {"mode": "user", "username": "jdoe", "password": "${PLM_PW}"}}}

        with patch.dict(os.environ, {"PLM_PW": "hunter2"}):
            config = load_config(write_config(data))

        assert config.password == "hunter2"

    def test_missing_default_file_uses_environment(self, tmp_path):
        env = {
            "ENOVIA_PASSPORT_URL": "https://plm.example.com/3dpassport",
            "ENOVIA_SERVICE_URL": "https://plm.example.com/enovia",
            "ENOVIA_USERNAME": "jdoe",
            "ENOVIA_PASSWORD": "pw",
        }
        with (
            patch.dict(os.environ, env),
            patch("config.config.DEFAULT_CONFIG_FILE", tmp_path / "absent.yaml"),
        ):
            config = load_config()

        assert config.username == "jdoe"

    def test_explicit_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="absent.yaml"):
            load_config(tmp_path / "absent.yaml")

    def test_missing_enovia_section_raises(self, write_config):
        with pytest.raises(ValueError, match="enovia"):
            load_config(write_config({"database": {"host": "x"}}))

    def test_invalid_url_raises(self, write_config):
        data = {"enovia": {**VALID["enovia"], "service_url": "plm.example.com/enovia"}}

        with pytest.raises(ValueError, match="service_url"):
            load_config(write_config(data))

    def test_unknown_mode_raises(self, write_config):
        data = {"enovia": {**VALID["enovia"], "auth": {"mode": "oauth"}}}

        with pytest.raises(ValueError, match="auth.mode"):
            load_config(write_config(data))

    def test_batch_mode_requires_service_credentials(self, write_config):
        data = {"enovia": {**VALID["enovia"], "auth": {"mode": "batch", "service_name": "svc"}}}

        with pytest.raises(ValueError, match="service_secret, on_behalf_of"):
            load_config(write_config(data))


# =========================================================================
# EnoviaConfig.validate
# =========================================================================


class TestValidate:
    def _config(self, **kwargs):
        values = dict(
            passport_url="https://plm.example.com/3dpassport",
            service_url="https://plm.example.com/enovia",
            username="jdoe",
            password="pw",
        )
        values.update(kwargs)
        return EnoviaConfig(**values)

    def test_valid(self):
        self._config().validate()

    def test_requires_passport_url(self):
        with pytest.raises(ValueError, match="passport_url is required"):
            self._config(passport_url="").validate()

    def test_user_mode_requires_password(self):
        with pytest.raises(ValueError, match="password"):
            self._config(password="").validate()

    @pytest.mark.parametrize("field", ["csrf_validity_minutes", "timeout_seconds"])
    def test_rejects_non_positive(self, field):
        with pytest.raises(ValueError, match=field):
            self._config(**{field: 0}).validate()

