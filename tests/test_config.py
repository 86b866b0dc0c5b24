from pathlib import Path

import pytest

from shared.config import AdmissionConfig, ConfigError, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ("ADMISSION_CONFIG", "ADMISSION_LOG_LEVEL", "ADMISSION_LOG_DIR"):
        monkeypatch.delenv(var, raising=False)
    # default lookup is relative to the working directory
    monkeypatch.chdir(tmp_path)


def write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_file():
    config = load_config()
    assert config == AdmissionConfig()
    assert config.log_level == "INFO"
    assert config.log_dir is None
    assert config.log_accepted is False


def test_default_file_in_working_directory(tmp_path):
    write(tmp_path / "admission.yaml", "log_level: debug\nlog_accepted: true\n")
    config = load_config()
    assert config.log_level == "DEBUG"
    assert config.log_accepted is True


def test_explicit_path(tmp_path):
    path = write(tmp_path / "custom.yaml", "log_dir: logs/here\n")
    assert load_config(path).log_dir == Path("logs/here")


def test_env_config_path(tmp_path, monkeypatch):
    path = write(tmp_path / "env.yaml", "log_level: WARNING\n")
    monkeypatch.setenv("ADMISSION_CONFIG", str(path))
    assert load_config().log_level == "WARNING"


def test_env_overrides_file(tmp_path, monkeypatch):
    path = write(tmp_path / "c.yaml", "log_level: ERROR\nlog_dir: a\n")
    monkeypatch.setenv("ADMISSION_LOG_LEVEL", "debug")
    monkeypatch.setenv("ADMISSION_LOG_DIR", str(tmp_path / "b"))
    config = load_config(path)
    assert config.log_level == "DEBUG"
    assert config.log_dir == tmp_path / "b"


def test_empty_file_gives_defaults(tmp_path):
    assert load_config(write(tmp_path / "empty.yaml", "")) == AdmissionConfig()


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yaml")


def test_missing_env_file(tmp_path, monkeypatch):
    monkeypatch.setenv("ADMISSION_CONFIG", str(tmp_path / "absent.yaml"))
    with pytest.raises(ConfigError):
        load_config()


@pytest.mark.parametrize("text", [
    "- just\n- a list\n",
    "log_level: LOUD\n",
    "log_accepted: maybe\n",
    "log_dir: 5\n",
    "max_drift_ms: 1\n",
    "log_level: [unclosed\n",
])
def test_invalid_files(tmp_path, text):
    with pytest.raises(ConfigError):
        load_config(write(tmp_path / "bad.yaml", text))


def test_invalid_env_level(monkeypatch):
    monkeypatch.setenv("ADMISSION_LOG_LEVEL", "chatty")
    with pytest.raises(ConfigError):
        load_config()
