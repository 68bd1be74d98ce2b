"""
哈希键分区
按 MD5 摘要把分区键映射到128位键空间中等宽的哈希键范围（Kinesis 分片方式）
"""

import hashlib
import math
import numbers
import re
from typing import Any, Callable, Dict, Iterable, List
from dataclasses import dataclass

from loguru import logger

from ..errors import InvalidDigestFormat, InvalidHashKey, InvalidPartitionCount


KEYSPACE_BITS = 128
KEYSPACE_SIZE = 1 << KEYSPACE_BITS
MAX_HASH_KEY = KEYSPACE_SIZE - 1

_DIGEST_PATTERN = re.compile(r"^[0-9a-f]{32}$")
_LINE_SPLIT = re.compile(r"\r?\n")


@dataclass(frozen=True)
class AssignmentRecord:
    """单个分区键的映射结果"""
    partition_key: str
    digest: str
    hash_key: int
    partition_index: int

    def to_dict(self) -> Dict[str, Any]:
        # 128位整数超出 JSON 数字精度，以十进制字符串输出
        return {
            'partition_key': self.partition_key,
            'digest': self.digest,
            'hash_key': str(self.hash_key),
            'partition_index': self.partition_index
        }


@dataclass(frozen=True)
class HashKeyRange:
    """分区的哈希键范围（闭区间）"""
    partition_index: int
    starting_hash_key: int
    ending_hash_key: int

    def contains(self, hash_key: int) -> bool:
        """检查哈希键是否属于此范围"""
        return self.starting_hash_key <= hash_key <= self.ending_hash_key

    def to_dict(self) -> Dict[str, Any]:
        return {
            'partition_index': self.partition_index,
            'starting_hash_key': str(self.starting_hash_key),
            'ending_hash_key': str(self.ending_hash_key)
        }


def md5_hex(text: str) -> str:
    """计算字符串的 MD5 摘要（32位小写十六进制）"""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def to_hash_key(digest_hex: str) -> int:
    """把32位十六进制摘要精确转换为哈希键"""
    if not isinstance(digest_hex, str):
        raise InvalidDigestFormat(f"Invalid MD5 hex: expected str, got {type(digest_hex).__name__}")

    normalized = digest_hex.strip().lower()
    if not _DIGEST_PATTERN.match(normalized):
        raise InvalidDigestFormat(f"Invalid MD5 hex: {digest_hex!r}")

    return int(normalized, 16)


def normalize_partition_count(partition_count: Any) -> int:
    """校验分区数并向下取整

    分区数必须是有限实数且向下取整后 >= 1；(0, 1) 之间的值（如 0.5）取整为 0，
    同样抛出 InvalidPartitionCount。
    """
    if isinstance(partition_count, bool) or not isinstance(partition_count, numbers.Real):
        raise InvalidPartitionCount(f"Invalid partition count: {partition_count!r}")

    if isinstance(partition_count, numbers.Integral):
        count = int(partition_count)
    else:
        if not math.isfinite(partition_count):
            raise InvalidPartitionCount(f"Invalid partition count: {partition_count!r}")
        count = math.floor(partition_count)

    if count < 1:
        raise InvalidPartitionCount(f"Invalid partition count: {partition_count!r}")

    return count


def to_partition_index(hash_key: int, partition_count: Any) -> int:
    """计算哈希键所在的分区: floor(hash_key * n / 2^128)"""
    count = normalize_partition_count(partition_count)

    if isinstance(hash_key, bool) or not isinstance(hash_key, int):
        raise InvalidHashKey(f"Hash key must be an int, got {type(hash_key).__name__}")
    if not 0 <= hash_key <= MAX_HASH_KEY:
        raise InvalidHashKey(f"Hash key out of 128-bit keyspace: {hash_key}")

    # 先乘后除，全程整数运算
    return (hash_key * count) >> KEYSPACE_BITS


def partition_key_to_hash_key(partition_key: str) -> int:
    """分区键 -> 哈希键"""
    return to_hash_key(md5_hex(partition_key))


def partition_key_to_partition_index(partition_key: str, partition_count: Any) -> int:
    """分区键 -> 分区编号"""
    return to_partition_index(partition_key_to_hash_key(partition_key), partition_count)


def analyze_partition_keys(partition_keys: Iterable[str], partition_count: Any,
                           digest: Callable[[str], str] = md5_hex) -> List[AssignmentRecord]:
    """批量映射分区键，保持输入顺序；任一键失败则整批失败"""
    count = normalize_partition_count(partition_count)

    records = []
    for key in partition_keys:
        digest_hex = digest(key)
        hash_key = to_hash_key(digest_hex)
        records.append(AssignmentRecord(
            partition_key=key,
            digest=digest_hex,
            hash_key=hash_key,
            partition_index=to_partition_index(hash_key, count)
        ))

    logger.debug("Analyzed {} partition keys across {} partitions", len(records), count)
    return records


def partition_hash_ranges(partition_count: Any) -> List[HashKeyRange]:
    """计算每个分区的哈希键范围，与 to_partition_index 的结果一致"""
    count = normalize_partition_count(partition_count)

    # 分区 i 的起点为 ceil(i * 2^128 / n)
    starts = [-((-i * KEYSPACE_SIZE) // count) for i in range(count)]
    starts.append(KEYSPACE_SIZE)

    return [
        HashKeyRange(
            partition_index=i,
            starting_hash_key=starts[i],
            ending_hash_key=starts[i + 1] - 1
        )
        for i in range(count)
    ]


def parse_keys(raw: str) -> List[str]:
    """按行拆分分区键，去掉首尾空白和空行"""
    lines = (line.strip() for line in _LINE_SPLIT.split(raw))
    return [line for line in lines if line]
