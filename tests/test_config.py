from __future__ import annotations

from pathlib import Path

import pytest

from hidpanel.core.config import PanelConfig, default_config_path, load_config
from hidpanel.core.errors import ConfigError


def _write_config(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_missing_default_config_uses_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    assert default_config_path() == tmp_path / "cfg" / "hidpanel" / "config.yaml"
    assert load_config() == PanelConfig()


def test_xdg_config_is_loaded(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    _write_config(
        tmp_path / "cfg" / "hidpanel" / "config.yaml",
        """
default_command: "01 02"
report_size: 32
response_timeout_ms: 250
log_level: DEBUG
""",
    )

    config = load_config()
    assert config.default_command == "01 02"
    assert config.report_size == 32
    assert config.response_timeout_ms == 250
    assert config.listen_poll_ms == 100
    assert config.log_level == "DEBUG"


def test_explicit_missing_path_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml")


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    path = _write_config(tmp_path / "empty.yaml", "")
    assert load_config(path) == PanelConfig()


@pytest.mark.parametrize(
    "content",
    [
        "report_size: 0\n",
        "log_level: LOUD\n",
        "unknown_key: 1\n",
        "report_size: \"64\"\n",
        "- not\n- a\n- mapping\n",
        "report_size: 8\nreport_size: 16\n",
        "default_command: [unterminated\n",
    ],
)
def test_invalid_config_rejected(tmp_path: Path, content: str) -> None:
    path = _write_config(tmp_path / "bad.yaml", content)
    with pytest.raises(ConfigError):
        load_config(path)
