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

"""Base exception hierarchy for :mod:`graphstats`."""

from __future__ import annotations


class GraphstatsError(Exception):
    """Base class for all graphstats exceptions.

    Catch this to handle any library-specific failure with a single handler
    while letting standard Python exceptions propagate normally.

    Note:
        Subclasses also inherit from a standard exception type (``ValueError``,
        ``KeyError``) so callers can use the more familiar handler.
    """


class ConfigError(GraphstatsError, ValueError):
    """Raised when collector settings are invalid.

    Example::

        try:
            config = CollectorConfig.from_env()
        except ConfigError as e:
            sys.exit(f"bad graphstats settings: {e}")
    """


class MetricNotFoundError(GraphstatsError, KeyError):
    """Raised when a registry read names a metric that was never recorded."""


class MetricKindError(GraphstatsError, ValueError):
    """Raised when a metric key has an unknown prefix or the wrong kind.

    Reading a histogram from a ``counter:`` key (or a scalar from a
    ``timing:`` key) raises this error.
    """


__all__ = [
    "ConfigError",
    "GraphstatsError",
    "MetricKindError",
    "MetricNotFoundError",
]
