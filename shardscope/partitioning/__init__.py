"""
分区包
按 MD5 哈希键范围把分区键映射到分区，并统计分布
"""

from .hash_partition import *
from .distribution import *

__all__ = [
    # 哈希键分区
    "KEYSPACE_SIZE",
    "MAX_HASH_KEY",
    "AssignmentRecord",
    "HashKeyRange",
    "md5_hex",
    "to_hash_key",
    "normalize_partition_count",
    "to_partition_index",
    "partition_key_to_hash_key",
    "partition_key_to_partition_index",
    "analyze_partition_keys",
    "partition_hash_ranges",
    "parse_keys",

    # 分布统计
    "DistributionSummary",
    "summarize_distribution",
    "find_hot_partitions",
]
