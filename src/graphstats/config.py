# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Collector settings, from code or ``GRAPHSTATS_*`` environment variables."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping

from .dataclasses import FrozenDataclass
from .errors import ConfigError
from .timeseries import DEFAULT_CAPACITY, DEFAULT_PERCENTILES


_ENV_PREFIX = "GRAPHSTATS_"
_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


@FrozenDataclass()
class CollectorConfig:
    """Settings for a :class:`~graphstats.collector.TimeSeriesCollector`.

    Attributes:
        interval: Seconds between sampling rounds. Series timestamps are
            whole seconds, so the interval must be at least one second.
        capacity: Samples retained per metric.
        percentiles: Quantile table for timing rows, each in ``[0, 1]``.
        backfill: Zero-fill new series to full capacity.
        host: Admin server bind address.
        port: Admin server port.
    """

    interval: float = 60.0
    capacity: int = DEFAULT_CAPACITY
    percentiles: tuple[float, ...] = DEFAULT_PERCENTILES
    backfill: bool = True
    host: str = "127.0.0.1"
    port: int = 9990

    def __post_init__(self) -> None:
        if not isinstance(self.percentiles, tuple):
            raw = self.percentiles
            try:
                fractions = (
                    _parse_fractions(raw)
                    if isinstance(raw, str)
                    else tuple(float(p) for p in raw)
                )
            except (TypeError, ValueError) as error:
                raise ConfigError(
                    f"percentiles {raw!r} are invalid: {error}"
                ) from error
            object.__setattr__(self, "percentiles", fractions)
        if self.interval < 1:
            raise ConfigError(
                f"interval must be at least 1 second, got {self.interval}"
            )
        if self.capacity <= 0:
            raise ConfigError(f"capacity must be positive, got {self.capacity}")
        if not self.percentiles:
            raise ConfigError("percentiles must not be empty")
        for p in self.percentiles:
            if not 0.0 <= p <= 1.0:
                raise ConfigError(f"percentile {p} is outside [0, 1]")
        if not 0 <= self.port <= 65535:
            raise ConfigError(f"port {self.port} is out of range")

    @property
    def interval_seconds(self) -> int:
        """Interval rounded to the whole seconds used by series timestamps."""
        return round(self.interval)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> CollectorConfig:
        """Build settings from ``GRAPHSTATS_*`` variables over the defaults.

        Recognised variables: ``GRAPHSTATS_INTERVAL``, ``GRAPHSTATS_CAPACITY``,
        ``GRAPHSTATS_PERCENTILES`` (comma-separated fractions),
        ``GRAPHSTATS_BACKFILL``, ``GRAPHSTATS_ADMIN_HOST`` and
        ``GRAPHSTATS_ADMIN_PORT``.

        Raises:
            ConfigError: If a variable cannot be parsed or fails validation.
        """
        env = os.environ if env is None else env
        changes: dict[str, object] = {}

        def take(name: str, field: str, parse: Callable[[str], object]) -> None:
            raw = env.get(_ENV_PREFIX + name)
            if raw is None or not raw.strip():
                return
            try:
                changes[field] = parse(raw.strip())
            except ValueError as error:
                raise ConfigError(
                    f"{_ENV_PREFIX}{name}={raw!r} is invalid: {error}"
                ) from error

        take("INTERVAL", "interval", float)
        take("CAPACITY", "capacity", int)
        take("PERCENTILES", "percentiles", _parse_fractions)
        take("BACKFILL", "backfill", _parse_bool)
        take("ADMIN_HOST", "host", str)
        take("ADMIN_PORT", "port", int)
        return cls().update(**changes)


def _parse_fractions(raw: str) -> tuple[float, ...]:
    return tuple(float(part) for part in raw.split(",") if part.strip())


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError("expected a boolean")


__all__ = ["CollectorConfig"]
