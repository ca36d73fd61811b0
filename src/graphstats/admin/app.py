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

"""FastAPI app exposing graph data and current stats."""

from __future__ import annotations

from collections.abc import Mapping

import uvicorn
from fastapi import FastAPI, HTTPException

from ..errors import MetricKindError, MetricNotFoundError
from ..runtime.logging import StructuredLogger, get_logger
from ..stats import MetricKind, StatsSource, parse_key
from ..timeseries import QueryAdapter, Row


class _GraphAppHandlers:
    def __init__(
        self,
        *,
        adapter: QueryAdapter,
        source: StatsSource | None,
    ) -> None:
        super().__init__()
        self._adapter = adapter
        self._source = source

    def list_keys(self) -> Mapping[str, list[str]]:
        return self._adapter.keys_payload()

    def get_series(self, key: str, p: str | None = None) -> Mapping[str, list[Row]]:
        return self._adapter.graph_data(key, p)

    def get_stats(self, key: str) -> Mapping[str, object]:
        if self._source is None:  # pragma: no cover - route only mounted with a source
            raise HTTPException(status_code=404, detail="No stats source configured")
        try:
            kind, _ = parse_key(key)
            if kind is MetricKind.TIMING:
                distribution = self._source.current_histogram(key).snapshot()
                return {key: distribution.summary(self._adapter.percentiles)}
            return {key: self._source.current_value(key)}
        except MetricNotFoundError:
            raise HTTPException(
                status_code=404, detail=f"Unknown metric: {key}"
            ) from None
        except MetricKindError as error:
            raise HTTPException(status_code=400, detail=str(error)) from None


def build_graph_app(
    adapter: QueryAdapter,
    *,
    source: StatsSource | None = None,
    logger: StructuredLogger | None = None,
) -> FastAPI:
    """Construct the admin app.

    Routes:
        - ``GET /graph_data``: ``{"keys": [...]}``
        - ``GET /graph_data/{key}?p=0,2``: ``{key: rows}``
        - ``GET /stats/{key}``: current cumulative value, only when a
          ``source`` is given
    """

    handlers = _GraphAppHandlers(adapter=adapter, source=source)

    app = FastAPI(title="graphstats admin")
    app.state.adapter = adapter
    app.state.logger = logger or get_logger(__name__)

    _ = app.get("/graph_data")(handlers.list_keys)
    _ = app.get("/graph_data/{key:path}")(handlers.get_series)
    if source is not None:
        _ = app.get("/stats/{key:path}")(handlers.get_stats)

    return app


def run_admin_server(
    app: FastAPI,
    *,
    host: str,
    port: int,
    logger: StructuredLogger,
) -> int:
    """Run uvicorn for ``app``; returns a process exit code."""

    url = f"http://{host}:{port}/graph_data"
    logger.info(
        "Starting graphstats admin server",
        event="admin.server.start",
        context={"url": url},
    )

    try:
        config = uvicorn.Config(app, host=host, port=port, log_config=None)
        server = uvicorn.Server(config)
        server.run()
    except Exception as error:  # pragma: no cover - depends on the host network
        logger.exception(
            "Failed to start graphstats admin server",
            event="admin.server.error",
            context={"url": url, "error": repr(error)},
        )
        return 3
    return 0


__all__ = ["build_graph_app", "run_admin_server"]
