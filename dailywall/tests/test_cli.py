"""
Test the CLI driver for dailywall

cli.py is the entry point for the dailywall program. Verify that invocations return the correct
exit code on success or failure. The network is patched out; configuration lives in tmp_path.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from dailywall.cli import cli
from dailywall.cli import import_commands
from dailywall.cli import attach_commands
from dailywall.config import init
from dailywall.dates import format_date
from dailywall.errors import TransportError
from dailywall.scheduler import utc_now
from dailywall.subcommands.run import build_scheduler

runner = CliRunner()


@pytest.fixture(scope="module", autouse=True)
def subcommands():
    """
    Import and attach all of the commands found in the /subcommands folder *without* invoking
    the entrypoint (main).
    """

    attach_commands(cli, import_commands())
    yield
    cli.commands = {}


@pytest.fixture
def config_dir(tmp_path, pictures_dir, monkeypatch):
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "config.json").write_text(json.dumps({"pictures_directory": str(pictures_dir)}))
    monkeypatch.setenv("DAILYWALL_CONFIG_DIR", str(directory))
    return directory


def test_commands_are_discovered():

    assert {"run", "fetch", "local"} <= set(cli.commands)


def test_invocation_help():
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "fetch" in result.output


def test_invocation_failure_invalid_args():
    result = runner.invoke(cli, ["--thiswillneverbeanoption"])

    assert result.exit_code != 0


def test_local_today(config_dir, pictures_dir):

    today = pictures_dir / f"{format_date(utc_now())}-Foo.jpg"
    today.touch()

    result = runner.invoke(cli, ["local"])

    assert result.exit_code == 0
    assert str(today) in result.output


def test_local_nothing(config_dir):

    result = runner.invoke(cli, ["local"])

    assert result.exit_code == 1


@patch("dailywall.bing_handler.download_image")
@patch("dailywall.bing_handler.image_of_the_day")
def test_fetch(mock_image_of_the_day, mock_download, config_dir, pictures_dir, picture):

    mock_image_of_the_day.return_value = picture

    result = runner.invoke(cli, ["fetch"])

    assert result.exit_code == 0
    mock_download.assert_called_once_with(picture, pictures_dir / picture.file_name)
    assert str(pictures_dir / picture.file_name) in result.output


@patch("dailywall.bing_handler.download_image")
@patch("dailywall.bing_handler.image_of_the_day")
def test_fetch_already_downloaded(mock_image_of_the_day, mock_download, config_dir, pictures_dir, picture):

    mock_image_of_the_day.return_value = picture
    (pictures_dir / picture.file_name).touch()

    result = runner.invoke(cli, ["fetch"])

    assert result.exit_code == 0
    mock_download.assert_not_called()


@patch("dailywall.bing_handler.image_of_the_day")
def test_fetch_offline(mock_image_of_the_day, config_dir):

    mock_image_of_the_day.side_effect = TransportError("offline")

    result = runner.invoke(cli, ["fetch"])

    assert result.exit_code == 1


def test_run_without_fallback_picture(config_dir):

    with patch("dailywall.config.DailywallConfig.locate_fallback_picture", return_value=None):
        result = runner.invoke(cli, ["run"])

    assert result.exit_code == 1
    assert "fallback" in result.output


def test_build_scheduler(config_dir, fallback_picture, pictures_dir, tmp_path):

    config = init()
    config.fallback_picture = fallback_picture
    config.current_picture_file = tmp_path / "current"

    scheduler = build_scheduler(config, events=None)

    assert scheduler.pictures_directory == pictures_dir
    assert scheduler.state.current_picture == fallback_picture
    assert len(scheduler.notifier.subscribers) == 1
