import pytest

from mccalc.calculator import calculate
from mccalc.plot import HISTOGRAM_COLUMNS, histogram_figure, histogram_frame, write_chart


def test_histogram_frame():
    outcome = calculate("0~10", iterations=300, bins=6)
    frame = histogram_frame(outcome.histogram)
    assert list(frame.columns) == HISTOGRAM_COLUMNS
    assert len(frame) == 6
    assert frame["probability"].sum() == pytest.approx(1.0)


def test_histogram_figure_marks_mean_and_sigmas():
    outcome = calculate("0~10", iterations=300, bins=6)
    fig = histogram_figure(outcome)
    assert len(fig.data) == 1
    assert len(fig.data[0].x) == 6
    # mean, median and +/-1, 2, 3 sigma
    assert len(fig.layout.shapes) == 8


def test_single_value_figure():
    outcome = calculate("5~5", iterations=10)
    fig = histogram_figure(outcome)
    assert len(fig.data[0].x) == 1
    assert len(fig.layout.shapes) == 2


def test_write_html(tmp_path):
    path = tmp_path / "chart.html"
    write_chart(calculate("1~2", iterations=50), str(path))
    assert "plotly" in path.read_text().lower()
