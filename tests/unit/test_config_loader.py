from pathlib import Path

import pytest

from asset_discovery.common.config_loader import DiscoveryConfig, FetchPolicy, load_config
from asset_discovery.common.errors import ConfigError


def test_load_config_from_repo_config_dir():
    config = load_config(Path("config"), environ={})
    assert config.endpoint == "https://overpass-api.de/api/interpreter"
    assert config.http_timeout == 60.0
    assert config.policy == FetchPolicy(max_retries=3, retry_delay=2.0)
    assert config.query_timeout_seconds == 60


def test_load_config_defaults_when_file_absent(tmp_path: Path):
    config = load_config(tmp_path, environ={})
    assert config == DiscoveryConfig()


def test_load_config_without_config_dir_uses_defaults():
    assert load_config(None, environ={}).policy.total_attempts == 4


def test_load_config_applies_overlay_values(tmp_path: Path):
    base = tmp_path / "base"
    overlay = tmp_path / "overlay"
    base.mkdir()
    overlay.mkdir()
    (base / "asset_discovery.yml").write_text(
        """overpass:
  endpoint: "https://overpass.example/api/interpreter"
http:
  timeout: "30s"
  max_retries: 2
  retry_delay: "1s"
""",
        encoding="utf-8",
    )
    (overlay / "asset_discovery.yml").write_text(
        """http:
  retry_delay: "250ms"
""",
        encoding="utf-8",
    )

    config = load_config(base, overlay_config_dir=overlay, environ={})

    assert config.endpoint == "https://overpass.example/api/interpreter"
    assert config.http_timeout == 30.0
    assert config.policy == FetchPolicy(max_retries=2, retry_delay=0.25)


def test_load_config_environment_overrides_file():
    config = load_config(
        Path("config"),
        environ={
            "OVERPASS_API_URL": "http://localhost:12345/api/interpreter",
            "HTTP_TIMEOUT": "1m30s",
            "MAX_RETRIES": "0",
            "RETRY_DELAY": "500ms",
        },
    )
    assert config.endpoint == "http://localhost:12345/api/interpreter"
    assert config.http_timeout == 90.0
    assert config.policy == FetchPolicy(max_retries=0, retry_delay=0.5)


def test_load_config_environment_does_not_leak_between_calls():
    load_config(None, environ={"MAX_RETRIES": "9"})
    assert load_config(None, environ={}).policy.max_retries == 3


@pytest.mark.parametrize(
    "environ",
    [
        {"MAX_RETRIES": "three"},
        {"MAX_RETRIES": "-1"},
        {"RETRY_DELAY": "soon"},
        {"HTTP_TIMEOUT": "-5s"},
    ],
)
def test_load_config_rejects_bad_environment_values(environ):
    with pytest.raises(ConfigError):
        load_config(None, environ=environ)


def test_load_config_rejects_unknown_keys(tmp_path: Path):
    (tmp_path / "asset_discovery.yml").write_text("http:\n  backoff: exponential\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path, environ={})
    load_config(tmp_path, environ={}, allow_unknown=True)
