"""Selection of a bounded, deterministic dimension list from record tags."""

from collections.abc import Mapping

from metricshipper.core.models import Dimension

DEFAULT_MAX_DIMENSIONS = 10
DEFAULT_PRIORITY_TAG = "host"


def select_dimensions(
    tags: Mapping[str, str],
    max_dimensions: int = DEFAULT_MAX_DIMENSIONS,
    priority_tag: str = DEFAULT_PRIORITY_TAG,
) -> tuple[Dimension, ...]:
    """Build the ordered dimensions for a record.

    The priority tag (default "host") always comes first when present, so it
    survives truncation. The other tags follow sorted by name. Tags beyond
    max_dimensions are dropped without error.

    Args:
        tags: Tag name to tag value.
        max_dimensions: Maximum number of dimensions to return.
        priority_tag: Tag that takes the first slot if present.

    Returns:
        Tuple of Dimension with length min(len(tags), max_dimensions).
    """
    if max_dimensions <= 0:
        return ()

    dimensions: list[Dimension] = []
    if priority_tag in tags:
        dimensions.append(Dimension(name=priority_tag, value=tags[priority_tag]))

    for name in sorted(k for k in tags if k != priority_tag):
        if len(dimensions) >= max_dimensions:
            break
        dimensions.append(Dimension(name=name, value=tags[name]))

    return tuple(dimensions)
