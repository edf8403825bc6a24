import json
import logging
import random
import sys
import typing

import click

import mccalc.functions as calc_functions
from mccalc.calculator import CalculationOutcome, calculate
from mccalc.plot import histogram_frame, write_chart
from mccalc.settings import SettingsError, load_settings, write_default_settings
from mccalc.stats import format_number


def format_outcome(outcome: CalculationOutcome) -> str:
    lines = ["Input: %s" % outcome.expression]
    if outcome.normalized and outcome.normalized != outcome.expression:
        lines.append("=> %s" % outcome.normalized)
    if outcome.error is not None:
        lines.append("Error: %s" % outcome.error)
        return "\n".join(lines)
    if outcome.deterministic:
        lines.append("Result: %s" % format_number(outcome.results[0]))
        return "\n".join(lines)

    lines.append(
        "Analytical range: %s ~ %s"
        % (format_number(outcome.analytical_min), format_number(outcome.analytical_max))
    )
    if outcome.analytical_note:
        lines.append("  Note: %s" % outcome.analytical_note)
    lines.append(
        "Simulated range: %s ~ %s (%d iterations)"
        % (
            format_number(outcome.simulated_min),
            format_number(outcome.simulated_max),
            outcome.iterations,
        )
    )
    lines.append("Mean: %s" % format_number(outcome.mean))
    lines.append("Std dev: %s" % format_number(outcome.std_dev))
    lines.append("Median: %s" % format_number(outcome.median))
    for p, value in outcome.percentiles.items():
        lines.append("P%s: %s" % (format_number(p), format_number(value)))
    for warning in outcome.warnings:
        lines.append("Warning: %s" % warning)

    frame = histogram_frame(outcome.histogram)
    frame["probability"] = frame["probability"].map(lambda p: "%.2f%%" % (p * 100))
    lines.append("")
    lines.append(frame[["label", "probability", "sigma"]].to_string(index=False))
    return "\n".join(lines)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr.")
def cli(verbose: bool):
    """Monte Carlo calculator for expressions with uncertain ranges such as 5~10."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )


@cli.command()
@click.argument("expression", nargs=-1, required=True)
@click.option("--iterations", "-n", type=click.IntRange(min=1), help="Monte Carlo iterations.")
@click.option("--bins", "-b", type=click.IntRange(min=1), help="Histogram bins.")
@click.option("--seed", "-s", type=int, help="Random seed for reproducible results.")
@click.option(
    "--percentile",
    "-p",
    "percentiles",
    type=click.FloatRange(0, 100),
    multiple=True,
    help="Percentile to report; may be repeated.",
)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Settings YAML file.")
@click.option("--plot", type=click.Path(dir_okay=False), help="Write the histogram chart (.png, .svg or .html).")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the outcome as JSON.")
def run(
    expression: typing.Tuple[str, ...],
    iterations: typing.Optional[int],
    bins: typing.Optional[int],
    seed: typing.Optional[int],
    percentiles: typing.Tuple[float, ...],
    config: typing.Optional[str],
    plot: typing.Optional[str],
    output: typing.Optional[str],
):
    """Evaluate EXPRESSION, e.g. mccalc run "1400~1700 * 0.55~0.65 - 600~700"."""
    try:
        settings = load_settings(config)
    except SettingsError as e:
        raise click.ClickException(str(e))
    if seed is None:
        seed = settings.seed
    rng = None if seed is None else random.Random(seed)

    outcome = calculate(
        " ".join(expression),
        iterations=iterations,
        bins=bins,
        percentiles=percentiles or None,
        settings=settings,
        rng=rng,
    )
    click.echo(format_outcome(outcome))

    if output:
        with open(output, "w") as f:
            json.dump(outcome.to_dict(), f, indent=2)
    if plot and outcome.ok:
        write_chart(outcome, plot)
    if not outcome.ok:
        sys.exit(1)


@cli.command()
@click.argument("name", required=False)
def functions(name: typing.Optional[str]):
    """List the functions usable in expressions, or show help for NAME."""
    if name is None:
        max_namelen = max(len(x) for x in calc_functions.NAMES_TO_FUNCTIONS.keys())
        for fn_name, fn in sorted(calc_functions.NAMES_TO_FUNCTIONS.items()):
            click.echo(fn_name + " " * (max_namelen - len(fn_name) + 2) + fn.description())
        click.echo("\nRun `mccalc functions <name>` for help on a function.")
        return
    fn = calc_functions.NAMES_TO_FUNCTIONS.get(name.lower())
    if fn is None:
        raise click.ClickException("function %s not found." % name)
    click.echo(fn.help())


@cli.command("init-config")
@click.argument("path", default="settings.yaml", required=False)
def init_config(path: str):
    """Write the default settings to PATH (settings.yaml)."""
    try:
        write_default_settings(path)
    except SettingsError as e:
        raise click.ClickException(str(e))
    click.echo("Default settings written to %s." % path)


def main(argv: typing.List[str] = sys.argv) -> int:
    return cli.main(args=argv[1:], prog_name="mccalc", standalone_mode=True)


if __name__ == "__main__":
    sys.exit(main())
