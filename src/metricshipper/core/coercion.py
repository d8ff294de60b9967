"""Conversion of field values into backend-legal numeric values."""

import calendar
import numbers
from datetime import datetime

from metricshipper.core.models import FieldValue


def coerce_value(value: FieldValue) -> float | None:
    """Convert a field value to a float.

    Args:
        value: Any field value from a MetricRecord.

    Returns:
        The numeric value, or None if the value kind is unsupported.
        Booleans map to 1.0/0.0, datetimes to whole Unix seconds.
    """
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, numbers.Integral):
        try:
            return float(int(value))
        except OverflowError:
            return None
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, datetime):
        # utctimetuple() drops sub-second precision; naive values are taken as UTC
        return float(calendar.timegm(value.utctimetuple()))
    return None
