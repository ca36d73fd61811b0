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

"""Frozen dataclass helpers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any, TypedDict, TypeVar, Unpack, cast, dataclass_transform

__all__ = ["FrozenDataclass"]

T = TypeVar("T")


class DataclassOptions(TypedDict, total=False):
    init: bool
    repr: bool
    eq: bool
    order: bool
    unsafe_hash: bool
    frozen: bool
    match_args: bool
    kw_only: bool
    slots: bool


@dataclass_transform(frozen_default=True)
def FrozenDataclass(
    **dataclass_kwargs: Unpack[DataclassOptions],
) -> Callable[[type[T]], type[T]]:
    """Dataclass decorator with frozen, slotted defaults.

    Mirrors :func:`dataclasses.dataclass` while defaulting to ``frozen=True``
    and ``slots=True``. The decorated class gains ``update(**changes)``,
    which returns a modified copy through :func:`dataclasses.replace` and so
    re-runs any ``__post_init__`` validation.

    Example::

        @FrozenDataclass()
        class Window:
            capacity: int = 60

        wide = Window().update(capacity=120)
    """

    options: DataclassOptions = {
        "frozen": True,
        "slots": True,
        **dataclass_kwargs,
    }

    def decorator(cls: type[T]) -> type[T]:
        dataclass_cls = cast(Callable[[type[T]], type[T]], dataclass(**options))(cls)
        if "update" not in vars(dataclass_cls):
            dataclass_cls.update = _update  # type: ignore[attr-defined]
        return dataclass_cls

    return decorator


def _update(self: Any, **changes: object) -> Any:  # noqa: ANN401
    return replace(self, **changes)
