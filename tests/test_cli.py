import pytest
from loguru import logger

from turnip_calc.apps.cli import create_parser, format_results, main
from turnip_calc.core.custom_types import Pattern


@pytest.fixture(autouse=True)
def restore_library_logging():
    yield
    # main() enables package logging; put the library default back.
    logger.disable("turnip_calc")


def test_single_pattern_output(capsys):
    code = main(["100", "90", "87", "82", "78", "74", "69", "66", "61", "58", "54", "50", "47"])
    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out == ["Analysis:", "Decreasing: 100%"]


def test_missing_prices_and_intermixed_option(capsys):
    code = main(["90", "--last-week", "smallspike", "?", "?", "48", "43"])
    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out[0] == "Analysis:"
    names = {line.split(":")[0] for line in out[1:]}
    assert names == {"SmallSpike", "Random"}


def test_no_prices_prints_prior(capsys):
    assert main(["100"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["Analysis:", "Random: 35%", "SmallSpike: 25%", "LargeSpike: 25%", "Decreasing: 15%"]


def test_no_match_exits_with_error(capsys):
    assert main(["100", "200"]) == 1
    assert "did not match any known pattern" in capsys.readouterr().out


@pytest.mark.parametrize("argv", [
    ["100"] + ["90"] * 13,
    ["100", "abc"],
    ["100", "-5"],
    ["x"],
    ["100", "--last-week", "spiky"],
    [],
])
def test_bad_arguments_exit_with_usage_error(argv):
    with pytest.raises(SystemExit) as exc:
        main(argv)
    assert exc.value.code == 2


def test_pattern_names_accept_underscored_form():
    args = create_parser().parse_args(["100", "-l", "large_spike"])
    assert args.last_week is Pattern.LARGE_SPIKE


def test_bad_config_path_is_a_usage_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["100", "--config", str(tmp_path / "missing.yaml")])
    assert exc.value.code == 2


def test_format_results_rounds_percentages():
    lines = format_results([(Pattern.RANDOM, 0.666), (Pattern.DECREASING, 0.334)])
    assert lines == ["Analysis:", "Random: 67%", "Decreasing: 33%"]


def test_log_level_applies_to_settings_load_and_run(capsys):
    assert main(["100", "90", "--log-level", "DEBUG"]) == 0
    err = capsys.readouterr().err
    assert "Settings loaded" in err
    assert "run.complete" in err


def test_quiet_log_level_hides_debug_lines(capsys):
    assert main(["100", "90", "--log-level", "WARNING"]) == 0
    err = capsys.readouterr().err
    assert "Settings loaded" not in err
    assert "run.complete" not in err
