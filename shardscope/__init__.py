"""
shardscope
近似 Kinesis 的 MD5 哈希键分区映射、分布统计与随机分区键生成
"""

__version__ = "1.0.0"

from .errors import *
from .partitioning import *
from .keygen import *

__all__ = [
    # 哈希键分区
    "to_hash_key",
    "to_partition_index",
    "analyze_partition_keys",
    "summarize_distribution",
    "partition_key_to_hash_key",
    "partition_key_to_partition_index",
    "partition_hash_ranges",
    "find_hot_partitions",
    "parse_keys",
    "md5_hex",
    "AssignmentRecord",
    "DistributionSummary",
    "HashKeyRange",

    # 键生成
    "compile_pattern",
    "generate_one",
    "generate_many",
    "PatternPiece",
    "PRESETS",

    # 错误
    "ShardScopeError",
    "InvalidDigestFormat",
    "InvalidPartitionCount",
    "InvalidHashKey",
    "PatternError",
    "UnsupportedSyntax",
    "EmptyCharClass",
    "InvalidRange",
    "UnterminatedCharClass",
    "UnterminatedEscape",
    "DanglingQuantifier",
    "InvalidQuantifier",
]
