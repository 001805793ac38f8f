from unittest.mock import MagicMock, patch

import pytest

from itep_scheduler import cli
from itep_scheduler.config import ConfigError, Settings
from itep_scheduler.errors import SchedulingFailed


def make_args(**overrides):
    values = {"config": "config.yaml", "now": True, "date": "2024-06-10", "verbose": False}
    values.update(overrides)
    return MagicMock(**values)


@patch("itep_scheduler.cli.run.run")
@patch("itep_scheduler.cli.config.load_config")
@patch("itep_scheduler.cli.parse_arguments")
def test_main_calls_run(mock_args, mock_load_config, mock_run):
    mock_args.return_value = make_args(verbose=True)
    settings = Settings(location="NATAL")
    mock_load_config.return_value = settings

    cli.main()

    mock_load_config.assert_called_once_with("config.yaml")
    mock_run.assert_called_once_with(settings, "2024-06-10")


@patch("itep_scheduler.cli.run.run")
@patch("itep_scheduler.cli.schedule.next_working_day")
@patch("itep_scheduler.cli.schedule.wait_until_scheduled_time")
@patch("itep_scheduler.cli.config.load_config")
@patch("itep_scheduler.cli.parse_arguments")
def test_main_waits_then_targets_next_working_day(mock_args, mock_load_config, mock_wait, mock_next_day, mock_run):
    mock_args.return_value = make_args(now=False, date=None)
    settings = Settings(schedule_time="07:45")
    mock_load_config.return_value = settings
    mock_next_day.return_value = MagicMock(isoformat=MagicMock(return_value="2024-06-11"))

    cli.main()

    mock_wait.assert_called_once_with("07:45")
    mock_run.assert_called_once_with(settings, "2024-06-11")


@patch("itep_scheduler.cli.run.run")
@patch("itep_scheduler.cli.config.load_config")
@patch("itep_scheduler.cli.parse_arguments")
def test_main_exits_on_scheduling_failure(mock_args, mock_load_config, mock_run):
    mock_args.return_value = make_args()
    mock_load_config.return_value = Settings()
    mock_run.side_effect = SchedulingFailed("All 2 booking attempts failed")

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == 1


@patch("itep_scheduler.cli.run.run")
@patch("itep_scheduler.cli.config.load_config")
@patch("itep_scheduler.cli.parse_arguments")
def test_main_exits_on_config_error(mock_args, mock_load_config, mock_run):
    mock_args.return_value = make_args()
    mock_load_config.side_effect = ConfigError("bad yaml")

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == 1
    mock_run.assert_not_called()


def test_parse_arguments():
    args = cli.parse_arguments(["--config", "other.yaml", "--now", "--date", "2024-06-10", "-v"])
    assert args.config == "other.yaml"
    assert args.now is True
    assert args.date == "2024-06-10"
    assert args.verbose is True


def test_parse_arguments_defaults():
    args = cli.parse_arguments([])
    assert args.config == "config.yaml"
    assert args.now is False
    assert args.date is None


def test_parse_arguments_rejects_bad_date():
    with pytest.raises(SystemExit):
        cli.parse_arguments(["--date", "10/06/2024"])
