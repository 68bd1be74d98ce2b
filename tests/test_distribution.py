"""Tests for the distribution summary and hot partition detection."""

import math
import random

import pytest

from shardscope.errors import InvalidPartitionCount
from shardscope.partitioning import find_hot_partitions, summarize_distribution


def test_summarize_concrete_case():
    summary = summarize_distribution(4, [0, 0, 1, 2, 2, 2])

    assert summary.partition_count == 4
    assert summary.counts == [2, 1, 3, 0]
    assert summary.total_keys == 6
    assert summary.average == 1.5
    assert summary.max_count == 3
    assert summary.max_partition == 2
    # 总体方差 (0.25 + 0.25 + 2.25 + 2.25) / 4
    assert summary.stddev == pytest.approx(math.sqrt(1.25))


def test_summarize_ties_go_to_lowest_index():
    summary = summarize_distribution(3, [2, 1])
    assert summary.counts == [0, 1, 1]
    assert summary.max_count == 1
    assert summary.max_partition == 1


def test_summarize_ignores_out_of_range_indexes():
    summary = summarize_distribution(2, [0, 5, -1, 1, 2])
    assert summary.counts == [1, 1]
    assert summary.total_keys == 5
    assert summary.average == 2.5


def test_summarize_empty_batch():
    summary = summarize_distribution(3, [])
    assert summary.counts == [0, 0, 0]
    assert summary.total_keys == 0
    assert summary.max_count == 0
    assert summary.max_partition == 0
    assert summary.average == 0
    assert summary.stddev == 0
    assert summary.share(1) == 0.0
    assert summary.max_share == 0.0


def test_summarize_counts_sum_to_total():
    rng = random.Random(3)
    for count in [1, 5, 16]:
        indexes = [rng.randrange(count) for _ in range(500)]
        summary = summarize_distribution(count, indexes)
        assert sum(summary.counts) == summary.total_keys == 500


def test_uniform_distribution_has_zero_stddev():
    summary = summarize_distribution(4, [0, 1, 2, 3] * 5)
    assert summary.stddev == 0
    assert summary.max_partition == 0


def test_summary_shares_and_dict():
    summary = summarize_distribution(4, [0, 0, 1, 2, 2, 2])
    assert summary.share(2) == 0.5
    assert summary.max_share == 0.5

    data = summary.to_dict()
    assert data["counts"] == [2, 1, 3, 0]
    assert data["max_partition"] == 2
    assert data["max_share"] == 0.5


def test_find_hot_partitions_orders_by_load():
    summary = summarize_distribution(4, [0, 0, 0, 0, 3, 3, 3, 1])
    # 平均 2.0，阈值 3.0
    hotspots = find_hot_partitions(summary, factor=1.5)
    assert [h["partition_index"] for h in hotspots] == [0]
    assert hotspots[0]["count"] == 4
    assert hotspots[0]["load_ratio"] == 2.0

    hotspots = find_hot_partitions(summary, factor=1.0)
    assert [h["partition_index"] for h in hotspots] == [0, 3]


def test_find_hot_partitions_none_for_empty_summary():
    assert find_hot_partitions(summarize_distribution(4, [])) == []


@pytest.mark.parametrize("count", [0, -2, 0.5, math.nan, None])
def test_summarize_rejects_invalid_partition_count(count):
    with pytest.raises(InvalidPartitionCount):
        summarize_distribution(count, [])


def test_summarize_floors_float_partition_count():
    summary = summarize_distribution(4.0, [0, 3, 3])
    assert summary.partition_count == 4
    assert summary.counts == [1, 0, 0, 2]
