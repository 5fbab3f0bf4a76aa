import pytest

from relay_scanner.config import REPO_ROOT, load_config, load_environment

ENV_KEYS = ["LOG_DIR", "LOG_LEVEL", "APP_NAME", "RELAY_SOURCE_URLS", "RELAY_PROXY"]


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_load_config_defaults(tmp_path):
    config = load_config(tmp_path / "missing.env")

    assert config.log_directory is None
    assert config.log_level == "INFO"
    assert config.app_name == "relay-scanner"
    assert config.source_urls == ()
    assert config.proxy is None


def test_load_config_reads_env_file(tmp_path):
    env_file = tmp_path / "test.env"
    env_file.write_text(
        "\n".join(
            [
                "# scanner settings",
                "LOG_DIR=logs/testing",
                "LOG_LEVEL=debug",
                "APP_NAME=bridge-hunter",
                "RELAY_SOURCE_URLS=https://a.example/details.json, https://b.example/details.json,",
                "RELAY_PROXY='socks5h://127.0.0.1:9050'",
            ]
        ),
        encoding="utf-8",
    )

    config = load_config(env_file)

    assert config.log_directory == REPO_ROOT / "logs/testing"
    assert config.log_level == "DEBUG"
    assert config.app_name == "bridge-hunter"
    assert config.source_urls == (
        "https://a.example/details.json",
        "https://b.example/details.json",
    )
    assert config.proxy == "socks5h://127.0.0.1:9050"


def test_load_config_prefers_environment_variables(tmp_path, monkeypatch):
    env_file = tmp_path / "test.env"
    env_file.write_text(
        "\n".join([f"LOG_DIR={tmp_path / 'from_env_file'}", "RELAY_PROXY=http://file:3128"]),
        encoding="utf-8",
    )
    env_log_dir = tmp_path / "from_env"
    monkeypatch.setenv("LOG_DIR", str(env_log_dir))
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("RELAY_PROXY", "http://env:3128")

    config = load_config(env_file)

    assert config.log_directory == env_log_dir
    assert config.log_level == "WARNING"
    assert config.proxy == "http://env:3128"


def test_load_config_rejects_unknown_log_level(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "loud")

    with pytest.raises(ValueError):
        load_config(tmp_path / "missing.env")


def test_load_environment_merges_file_and_environment(tmp_path, monkeypatch):
    env_file = tmp_path / "test.env"
    env_file.write_text("APP_NAME=from-file\nLOG_LEVEL=info\n", encoding="utf-8")
    monkeypatch.setenv("APP_NAME", "from-env")

    values = load_environment(env_file)

    assert values["APP_NAME"] == "from-env"
    assert values["LOG_LEVEL"] == "info"
