# tests/app/test_cli.py
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from website_carbon import app
from website_carbon.core.managers.config_manager import config_manager
from website_carbon.errors import NoPagesMeasured
from website_carbon.model import RunSummary


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(app, "configure_logger", MagicMock())


@pytest.fixture(autouse=True)
def restore_settings():
    yield
    config_manager.reset()


@pytest.fixture
def controller_class():
    with patch("website_carbon.app.ScorecardController") as mocked:
        instance = MagicMock()
        instance.run = AsyncMock(return_value=RunSummary(pages_assessed=1, mean_bytes=1.0, mean_co2=0.1))
        mocked.return_value = instance
        yield mocked


def _options(controller_class):
    return controller_class.call_args.args[0]


def test_no_arguments_prints_help(capsys, controller_class):
    assert app.main([]) == 0
    assert "usage: website-carbon" in capsys.readouterr().out
    controller_class.assert_not_called()


def test_invalid_url_exits_with_error(capsys, controller_class):
    assert app.main(["example.com"]) == 1
    assert "Invalid URL" in capsys.readouterr().err
    controller_class.assert_not_called()


def test_defaults(controller_class):
    assert app.main(["https://example.com"]) == 0

    options = _options(controller_class)
    assert options.target.site_url == "https://example.com"
    assert options.output_format == "cli"
    assert options.max_pages == 100
    assert options.measure.mode == "cdp"
    assert options.measure.event == "idle"
    assert options.carbon_model.model_name == "swd"
    assert options.carbon_model.ratings_enabled is True
    assert options.export_path is None


def test_flags_reach_run_options(controller_class):
    argv = [
        "https://example.com", "-o", "csv", "-p", "5", "--measure-event", "load",
        "--measure-mode", "buffer", "-m", "1byte", "--no-ratings",
    ]
    assert app.main(argv) == 0

    options = _options(controller_class)
    assert options.output_format == "csv"
    assert options.max_pages == 5
    assert options.measure.event == "load"
    assert options.measure.mode == "buffer"
    assert options.carbon_model.model_name == "1byte"
    assert options.carbon_model.ratings_enabled is False


def test_file_wins_over_positional(tmp_path, controller_class):
    url_file = tmp_path / "urls.txt"
    url_file.write_text("https://example.com/\n")

    assert app.main(["not-even-a-url", "--file", str(url_file)]) == 0

    options = _options(controller_class)
    assert options.target.site_url is None
    assert options.target.url_file == url_file


@pytest.mark.parametrize("argv", [
    ["https://example.com", "--measure-mode", "pcap"],
    ["https://example.com", "-m", "2byte"],
    ["https://example.com", "-p", "0"],
    ["https://example.com", "-o", "json"],
])
def test_usage_errors_exit_with_2(argv, controller_class):
    with pytest.raises(SystemExit) as excinfo:
        app.main(argv)
    assert excinfo.value.code == 2
    controller_class.assert_not_called()


def test_run_errors_exit_with_1(capsys, controller_class):
    controller_class.return_value.run.side_effect = NoPagesMeasured()
    assert app.main(["https://example.com"]) == 1
    assert "No pages could be measured" in capsys.readouterr().err


def test_log_level_override(controller_class):
    assert app.main(["https://example.com", "--log-level", "debug"]) == 0
    assert app.configure_logger.call_args.kwargs["override_level"] == "DEBUG"


def test_flags_override_settings_for_the_run(controller_class):
    argv = ["https://example.com", "-p", "7", "--measure-mode", "buffer", "--measure-event", "load"]
    assert app.main(argv) == 0

    assert config_manager.get_nested("discovery.default_max_pages") == 7
    assert config_manager.get_nested("measure.mode") == "buffer"
    assert config_manager.get_nested("measure.event") == "load"
    # untouched settings still come from settings.json
    assert _options(controller_class).measure.timeout_ms == 45000


def test_settings_change_the_defaults(controller_class):
    config_manager.set_nested("discovery.default_max_pages", "12")
    config_manager.set_nested("measure.event", "load")

    assert app.main(["https://example.com"]) == 0

    options = _options(controller_class)
    assert options.max_pages == 12
    assert options.measure.event == "load"
