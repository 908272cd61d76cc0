import logging
from uuid import UUID

import pytest
from click.testing import CliRunner

import main
from common.config import get_settings, update_settings


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text('[store]\nbackend = "memory"\n[logger]\nlevel = "warning"\n')
    previous = get_settings()
    yield path
    update_settings(previous)
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)


def test_put_prints_new_id(tmp_path, config_file):
    source = tmp_path / "notes.txt"
    source.write_bytes(b"some notes")

    result = CliRunner().invoke(main.cli, ["--config", str(config_file), "put", str(source)])

    assert result.exit_code == 0, result.output
    UUID(result.output.strip())


def test_rm_missing_file_succeeds(config_file):
    result = CliRunner().invoke(main.cli, ["--config", str(config_file), "rm", str(UUID(int=1))])
    assert result.exit_code == 0, result.output


def test_cat_missing_file_fails(config_file):
    result = CliRunner().invoke(main.cli, ["--config", str(config_file), "cat", str(UUID(int=1))])

    assert result.exit_code != 0
    assert "does not exist" in result.output


def test_malformed_id_fails(config_file):
    result = CliRunner().invoke(main.cli, ["--config", str(config_file), "stat", "nope"])

    assert result.exit_code != 0
    assert "Invalid file id" in result.output


def test_ls_empty_root(config_file):
    result = CliRunner().invoke(main.cli, ["--config", str(config_file), "ls"])

    assert result.exit_code == 0
    assert result.output == ""


def test_get_missing_file_creates_nothing(tmp_path, config_file):
    destination = tmp_path / "out.bin"

    result = CliRunner().invoke(main.cli, ["--config", str(config_file), "get", str(UUID(int=1)), str(destination)])

    assert result.exit_code != 0
    assert "does not exist" in result.output
    assert not destination.exists()
