"""Tests for the batch partitioner."""

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from metricshipper.core.errors import ConfigurationError
from metricshipper.core.partition import partition


class TestPartition:
    """Tests for partition()."""

    @pytest.mark.core
    def test_twenty_five_items_split_twenty_and_five(self) -> None:
        """25 items with a limit of 20 split into 20 and 5."""
        items = list(range(25))
        parts = partition(20, items)
        assert [len(p) for p in parts] == [20, 5]
        assert parts[0] == list(range(20))
        assert parts[1] == list(range(20, 25))

    @pytest.mark.core
    def test_exact_multiple_has_no_short_part(self) -> None:
        """An exact multiple gives only full partitions."""
        assert [len(p) for p in partition(20, list(range(40)))] == [20, 20]

    @pytest.mark.core
    def test_empty_input_yields_no_partitions(self) -> None:
        """No items give no partitions."""
        assert partition(20, []) == []

    @pytest.mark.core
    def test_single_item(self) -> None:
        """One item gives one partition."""
        assert partition(20, ["x"]) == [["x"]]

    @pytest.mark.core
    def test_input_is_not_modified(self) -> None:
        """The input sequence is left untouched."""
        items = [1, 2, 3]
        partition(2, items)
        assert items == [1, 2, 3]

    @pytest.mark.core
    @pytest.mark.parametrize("max_size", [0, -1, 1.5, True, "20"])
    def test_invalid_max_size_raises(self, max_size: object) -> None:
        """Bad limits are a ConfigurationError."""
        with pytest.raises(ConfigurationError, match="max_size"):
            partition(max_size, [1, 2])  # type: ignore[arg-type]


class TestPartitionProperties:
    """Property-based tests for partition()."""

    @pytest.mark.tra("Core.Partition.Coverage")
    @pytest.mark.tier(0)
    @given(items=st.lists(st.integers()), max_size=st.integers(1, 50))
    def test_concatenation_reproduces_input(
        self, items: list[int], max_size: int
    ) -> None:
        """Concatenated partitions equal the input."""
        parts = partition(max_size, items)
        assert [x for part in parts for x in part] == items

    @pytest.mark.tra("Core.Partition.Bounded")
    @pytest.mark.tier(0)
    @given(items=st.lists(st.integers()), max_size=st.integers(1, 50))
    def test_only_last_part_may_be_short(
        self, items: list[int], max_size: int
    ) -> None:
        """Every partition but the last is full."""
        parts = partition(max_size, items)
        assert all(len(p) == max_size for p in parts[:-1])
        assert all(1 <= len(p) <= max_size for p in parts)

    @pytest.mark.tra("Core.Partition.Count")
    @pytest.mark.tier(0)
    @given(items=st.lists(st.integers()), max_size=st.integers(1, 50))
    def test_count_is_ceiling(self, items: list[int], max_size: int) -> None:
        """The partition count is ceil(n / max_size)."""
        assert len(partition(max_size, items)) == math.ceil(len(items) / max_size)
