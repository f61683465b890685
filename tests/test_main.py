import pytest

from oncalldash import FALLBACK_LOG_PATH, get_log_path
from oncalldash.__main__ import main
from oncalldash.config import AppConfig


@pytest.fixture(autouse=True)
def quiet(mocker, monkeypatch):
    monkeypatch.delenv("ONCALLDASH_CONFIG", raising=False)
    return mocker.patch("oncalldash.__main__.setup_logging")


def test_clean_exit(mocker, quiet):
    run = mocker.patch("oncalldash.textual_app.run")

    assert main([]) == 0

    run.assert_called_once_with(AppConfig())
    quiet.assert_called_once_with("INFO", None)


def test_cli_overrides_logging(mocker, quiet):
    mocker.patch("oncalldash.textual_app.run")
    main(["--log-level", "debug", "--log-file", "/tmp/x.log"])
    quiet.assert_called_once_with("debug", "/tmp/x.log")


def test_bad_config_exits_2(tmp_path, mocker, capsys):
    run = mocker.patch("oncalldash.textual_app.run")

    assert main(["--config", str(tmp_path / "missing.yaml")]) == 2

    run.assert_not_called()
    assert "Cannot read config" in capsys.readouterr().err


def test_crash_exits_1(mocker, capsys):
    mocker.patch("oncalldash.textual_app.run", side_effect=RuntimeError("no tty"))

    assert main([]) == 1
    assert "no tty" in capsys.readouterr().err


def test_unknown_argument_exits_2():
    with pytest.raises(SystemExit) as exc:
        main(["--bogus"])
    assert exc.value.code == 2


def test_mistyped_config_value_exits_2(tmp_path, mocker, capsys):
    path = tmp_path / "oncalldash.yaml"
    path.write_text("logging:\n  level: 10\n")
    run = mocker.patch("oncalldash.textual_app.run")

    assert main(["--config", str(path)]) == 2

    run.assert_not_called()
    assert "logging.level" in capsys.readouterr().err


def test_log_path_under_xdg_data_home(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    path = get_log_path()

    assert path == str(tmp_path / "oncalldash" / "logs" / "oncalldash.log")
    assert (tmp_path / "oncalldash" / "logs").is_dir()


def test_log_path_falls_back_when_unwritable(tmp_path, monkeypatch):
    blocker = tmp_path / "data"
    blocker.write_text("not a directory")
    monkeypatch.setenv("XDG_DATA_HOME", str(blocker))

    assert get_log_path() == FALLBACK_LOG_PATH
