import json

from click.testing import CliRunner

from mccalc.__main__ import cli


def _run(*args):
    return CliRunner().invoke(cli, list(args))


def test_deterministic_run():
    result = _run("run", "2 + 3 * 4")
    assert result.exit_code == 0
    assert "Result: 14" in result.output


def test_probabilistic_run():
    result = _run("run", "-n", "500", "-s", "1", "1~2 + 1~2")
    assert result.exit_code == 0
    assert "=> sample(uniform(1, 2)) + sample(uniform(1, 2))" in result.output
    assert "Analytical range: 2 ~ 4" in result.output
    assert "Mean: " in result.output
    assert "P95: " in result.output
    assert "probability" in result.output


def test_expression_may_span_arguments():
    result = _run("run", "2", "x", "3")
    assert "Result: 6" in result.output


def test_custom_percentiles():
    result = _run("run", "-n", "100", "-p", "25", "-p", "75", "0~1")
    assert "P25: " in result.output
    assert "P5: " not in result.output


def test_error_exit_status():
    result = _run("run", "-n", "10", "1 / (0~0)")
    assert result.exit_code == 1
    assert "Error: calculation resulted in errors for all 10 iterations" in result.output


def test_json_output(tmp_path):
    path = tmp_path / "out.json"
    result = _run("run", "-n", "200", "-s", "1", "-o", str(path), "1~2")
    assert result.exit_code == 0
    data = json.loads(path.read_text())
    assert data["analytical_min"] == 1
    assert data["analytical_max"] == 2
    assert len(data["histogram"]) == 23


def test_html_chart(tmp_path):
    path = tmp_path / "chart.html"
    result = _run("run", "-n", "200", "--plot", str(path), "1~2")
    assert result.exit_code == 0
    assert path.exists()


def test_config_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("iterations: 42\nbins: 4\n")
    result = _run("run", "-c", str(path), "0~1")
    assert "(42 iterations)" in result.output


def test_bad_config_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("bins: -3\n")
    result = _run("run", "-c", str(path), "0~1")
    assert result.exit_code == 1
    assert "bins must be a positive integer" in result.output


def test_invalid_iterations():
    result = _run("run", "-n", "0", "1~2")
    assert result.exit_code == 2


def test_function_listing():
    result = _run("functions")
    assert result.exit_code == 0
    assert "sample" in result.output
    assert "uniform" in result.output


def test_function_help():
    result = _run("functions", "ROUND")
    assert result.exit_code == 0
    assert "round(<x>[, <digits>])" in result.output
    assert _run("functions", "nope").exit_code == 1


def test_init_config(tmp_path):
    path = tmp_path / "settings.yaml"
    assert _run("init-config", str(path)).exit_code == 0
    assert path.exists()
    result = _run("init-config", str(path))
    assert result.exit_code == 1
    assert "already exists" in result.output
