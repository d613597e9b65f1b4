from pathlib import Path

import pytest

from vault_operator.config import EnvLoader
from vault_operator.vault import ThresholdConfig


def test_env_loader_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("FOO=file\nBAR=file\n")

    monkeypatch.setenv("BAR", "env")

    loader = EnvLoader(env_file)
    data = loader.load({"BAR": "override", "BAZ": "override"})

    assert data["FOO"] == "file"
    assert data["BAR"] == "override"
    assert data["BAZ"] == "override"


def test_env_loader_missing_file_is_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ONLY_ENV", "yes")

    data = EnvLoader(tmp_path / "missing.env").load()

    assert data["ONLY_ENV"] == "yes"


def test_threshold_config_from_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("VAULT_OPERATOR_SECRET_SHARES", raising=False)
    monkeypatch.delenv("VAULT_OPERATOR_SECRET_THRESHOLD", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("VAULT_OPERATOR_SECRET_SHARES=3\nVAULT_OPERATOR_SECRET_THRESHOLD=2\n")

    config = ThresholdConfig.from_env(env=EnvLoader(env_file).load())

    assert config.secret_shares == 3
    assert config.secret_threshold == 2
