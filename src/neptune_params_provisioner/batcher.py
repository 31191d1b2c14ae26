"""Split parameter sequences into API-sized batches."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from neptune_params.models import MAX_PARAMS_PER_CALL

T = TypeVar("T")


def batch(items: Sequence[T], max_size: int = MAX_PARAMS_PER_CALL) -> list[list[T]]:
    """Chunk ``items`` into consecutive batches of at most ``max_size``.

    Order is preserved within and across batches. An empty input yields no
    batches; only the last batch may be short.
    """
    if max_size < 1:
        raise ValueError("max_size must be positive")
    return [list(items[i : i + max_size]) for i in range(0, len(items), max_size)]
