"""
分区分布统计
汇总每个分区的键数量，并检测热点分区
"""

import math
from typing import Any, Dict, Iterable, List
from dataclasses import dataclass, field

from loguru import logger

from .hash_partition import normalize_partition_count


@dataclass
class DistributionSummary:
    """分区分布摘要"""
    partition_count: int
    total_keys: int
    counts: List[int] = field(default_factory=list)
    max_count: int = 0
    max_partition: int = 0
    average: float = 0.0
    stddev: float = 0.0

    def share(self, partition_index: int) -> float:
        """分区占全部键的比例"""
        if self.total_keys == 0:
            return 0.0
        return self.counts[partition_index] / self.total_keys

    @property
    def max_share(self) -> float:
        return self.share(self.max_partition)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'partition_count': self.partition_count,
            'total_keys': self.total_keys,
            'counts': list(self.counts),
            'max_count': self.max_count,
            'max_partition': self.max_partition,
            'max_share': self.max_share,
            'average': self.average,
            'stddev': self.stddev
        }


def summarize_distribution(partition_count: Any, partition_indexes: Iterable[int]) -> DistributionSummary:
    """统计分区分布（总体标准差，覆盖所有分区包括空分区）"""
    partition_count = normalize_partition_count(partition_count)
    indexes = list(partition_indexes)
    counts = [0] * partition_count

    dropped = 0
    for idx in indexes:
        if 0 <= idx < partition_count:
            counts[idx] += 1
        else:
            dropped += 1
    if dropped:
        logger.debug("Ignored {} out-of-range partition indexes", dropped)

    total_keys = len(indexes)
    average = total_keys / partition_count

    # 只有严格更大才替换，平局取最小编号
    max_count = -math.inf
    max_partition = 0
    for i, count in enumerate(counts):
        if count > max_count:
            max_count = count
            max_partition = i

    variance = sum((count - average) ** 2 for count in counts) / partition_count

    return DistributionSummary(
        partition_count=partition_count,
        total_keys=total_keys,
        counts=counts,
        max_count=max_count,
        max_partition=max_partition,
        average=average,
        stddev=math.sqrt(variance)
    )


def find_hot_partitions(summary: DistributionSummary, factor: float = 1.5) -> List[Dict[str, Any]]:
    """检测热点分区: 键数量超过平均值 factor 倍的分区，按负载从高到低"""
    threshold = summary.average * factor

    hotspots = [
        {
            'partition_index': i,
            'count': count,
            'share': summary.share(i),
            'load_ratio': count / summary.average if summary.average else 0.0
        }
        for i, count in enumerate(summary.counts)
        if count > threshold
    ]

    hotspots.sort(key=lambda h: (-h['count'], h['partition_index']))
    return hotspots
