import io
import math
import os
import typing

import pandas
import plotly.graph_objects as go

from mccalc.calculator import CalculationOutcome
from mccalc.stats import HistogramBin, format_number

SIGMA_COLORS: typing.Dict[str, str] = {
    "1": "hsl(180, 70%, 50%)",
    "2": "hsl(120, 60%, 50%)",
    "3": "hsl(55, 85%, 50%)",
    "other": "hsl(0, 0%, 65%)",
}

HISTOGRAM_COLUMNS = ["label", "center", "lower", "upper", "probability", "sigma"]


def histogram_frame(bins: typing.Sequence[HistogramBin]) -> pandas.DataFrame:
    return pandas.DataFrame.from_records(
        [
            (b.label, b.center, b.lower_bound, b.upper_bound, b.probability, b.sigma_zone)
            for b in bins
        ],
        columns=HISTOGRAM_COLUMNS,
    )


def histogram_figure(outcome: CalculationOutcome, title: str = "Outcome Distribution") -> go.Figure:
    data = histogram_frame(outcome.histogram)
    width = (data["upper"] - data["lower"]).replace(0, 1).tolist()
    fig = go.Figure(
        go.Bar(
            x=data["center"],
            y=data["probability"],
            width=width,
            marker_color=[SIGMA_COLORS[zone] for zone in data["sigma"]],
            hovertext=data["label"],
            name="probability",
        )
    )

    markers = [
        (outcome.mean, "mean %s" % format_number(outcome.mean), "solid"),
        (outcome.median, "median %s" % format_number(outcome.median), "dash"),
    ]
    if outcome.std_dev > 0:
        for k in (1, 2, 3):
            for sign in (-1, 1):
                markers.append(
                    (outcome.mean + sign * k * outcome.std_dev, "%+dσ" % (sign * k), "dot")
                )
    for x, text, dash in markers:
        if not math.isfinite(x):
            continue
        fig.add_vline(x=x, line_dash=dash, line_width=1, annotation_text=text)

    fig.update_layout(title=title, bargap=0, showlegend=False)
    fig.update_xaxes(title_text="value")
    fig.update_yaxes(title_text="probability", tickformat="%")
    return fig


def write_chart(outcome: CalculationOutcome, path: str) -> None:
    """Write the histogram to ``path``, as HTML if the extension says so, else as an image."""
    fig = histogram_figure(outcome)
    extension = os.path.splitext(path)[1].lower()
    if extension in (".html", ".htm"):
        fig.write_html(path)
        return
    stream = io.BytesIO()
    fig.write_image(file=stream, format=extension.lstrip(".") or "png")
    with open(path, "wb") as f:
        f.write(stream.getvalue())
