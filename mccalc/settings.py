import logging
import os
import shutil
import typing
from dataclasses import dataclass, field

import yaml

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = os.path.join(os.path.dirname(__file__), "settings.default.yaml")


class SettingsError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    iterations: int = 100000
    bins: int = 23
    percentiles: typing.Tuple[float, ...] = (5, 10, 50, 90, 95)
    max_exact_ranges: int = 8
    seed: typing.Optional[int] = None
    source: typing.Optional[str] = field(default=None, compare=False)


def _positive_int(data: typing.Dict[str, typing.Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise SettingsError("%s must be a positive integer, got %r" % (key, value))
    return value


def _read(path: str) -> typing.Dict[str, typing.Any]:
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SettingsError("%s: expected a mapping at the top level" % path)
    return data


def load_settings(path: typing.Optional[str] = None) -> Settings:
    """Load the packaged defaults, overlaid with ``path`` if given."""
    data = _read(DEFAULT_SETTINGS_FILE)
    if path is not None:
        overrides = _read(path)
        unknown = set(overrides) - set(data)
        if unknown:
            raise SettingsError(
                "%s: unknown settings %s" % (path, ", ".join(sorted(unknown)))
            )
        data.update(overrides)
        logger.debug("loaded settings from %s", path)

    percentiles = data["percentiles"]
    if not isinstance(percentiles, list) or not all(
        isinstance(p, (int, float)) and not isinstance(p, bool) and 0 <= p <= 100
        for p in percentiles
    ):
        raise SettingsError(
            "percentiles must be a list of numbers between 0 and 100, got %r"
            % (percentiles,)
        )
    seed = data["seed"]
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise SettingsError("seed must be an integer, got %r" % (seed,))

    return Settings(
        iterations=_positive_int(data, "iterations"),
        bins=_positive_int(data, "bins"),
        percentiles=tuple(percentiles),
        max_exact_ranges=_positive_int(data, "max_exact_ranges"),
        seed=seed,
        source=path,
    )


def write_default_settings(path: str) -> None:
    if os.path.exists(path):
        raise SettingsError("%s already exists" % path)
    shutil.copy(DEFAULT_SETTINGS_FILE, path)
