"""Order-preserving partitioning of datums into size-bounded batches."""

from collections.abc import Sequence
from typing import TypeVar

from metricshipper.core.errors import ConfigurationError

T = TypeVar("T")


def partition(max_size: int, items: Sequence[T]) -> list[list[T]]:
    """Split items into consecutive chunks of at most max_size.

    Args:
        max_size: Maximum chunk length; must be an int >= 1.
        items: Sequence to split. Not modified.

    Returns:
        ceil(len(items) / max_size) chunks whose concatenation equals items.
        An empty input yields an empty list.

    Raises:
        ConfigurationError: If max_size is not a positive int.
    """
    if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size < 1:
        raise ConfigurationError(f"max_size must be an int >= 1, got {max_size!r}")

    return [
        list(items[start : start + max_size])
        for start in range(0, len(items), max_size)
    ]
