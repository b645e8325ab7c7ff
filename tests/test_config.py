from __future__ import annotations

from pathlib import Path

import pytest

from complaintdesk.config import (
    ServiceConfig,
    load_config_from_env,
    load_service_config,
    resolve_config_path,
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_when_no_file_exists(tmp_path: Path) -> None:
    config = load_config_from_env({"COMPLAINTDESK_CONFIG": str(tmp_path / "missing.yaml")})
    assert config == ServiceConfig()
    assert config.admin_secret == "admin123"
    assert config.port == 8080


def test_load_service_config_reads_yaml(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "service.yaml",
        "admin_secret: s3cret\nhost: 127.0.0.1\nport: 9000\nlog_level: DEBUG\n",
    )
    config = load_service_config(path)
    assert config == ServiceConfig(admin_secret="s3cret", host="127.0.0.1", port=9000, log_level="debug")


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    path = _write(tmp_path / "empty.yaml", "")
    assert load_service_config(path) == ServiceConfig()


@pytest.mark.parametrize(
    "body",
    [
        "admin_secret: ''\n",
        "port: 0\n",
        "port: 70000\n",
        "log_level: loud\n",
        "unexpected: 1\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_configuration_is_rejected(tmp_path: Path, body: str) -> None:
    path = _write(tmp_path / "bad.yaml", body)
    with pytest.raises(ValueError):
        load_service_config(path)


def test_environment_overrides_file(tmp_path: Path) -> None:
    path = _write(tmp_path / "service.yaml", "admin_secret: from-file\nport: 9000\n")
    config = load_config_from_env(
        {
            "COMPLAINTDESK_CONFIG": str(path),
            "COMPLAINTDESK_ADMIN_SECRET": "from-env",
            "COMPLAINTDESK_PORT": "9100",
        }
    )
    assert config.admin_secret == "from-env"
    assert config.port == 9100
    assert config.host == "0.0.0.0"


def test_non_numeric_port_override_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_config_from_env(
            {
                "COMPLAINTDESK_CONFIG": str(tmp_path / "missing.yaml"),
                "COMPLAINTDESK_PORT": "eighty",
            }
        )


def test_resolve_config_path_defaults_to_project_config() -> None:
    path = resolve_config_path(None)
    assert path.name == "complaintdesk.yaml"
    assert path.parent.name == "config"
