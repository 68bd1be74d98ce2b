#!/usr/bin/env python3
"""
shardscope - 演示程序
生成随机分区键，查看它们在 Kinesis 式哈希键范围上的分布
"""

import random
from typing import List

# 导入我们的模块
import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shardscope import (
    PRESETS,
    ShardScopeError,
    analyze_partition_keys,
    compile_pattern,
    find_hot_partitions,
    generate_many,
    partition_hash_ranges,
    summarize_distribution,
)
from shardscope.logging import init_logging
from config.settings import settings


def fmt_pct(value: float) -> str:
    return f"{value * 100:.2f}%"


class ShardScopeDemo:
    """分区分布演示"""

    def __init__(self, partition_count: int = None, seed: int = None):
        self.partition_count = partition_count or settings.partitioning.default_partition_count
        self.rng = random.Random(seed)

    def run(self):
        """运行完整演示"""
        print("🎯 shardscope - 分区键分布演示")
        print("=" * 60)

        self.demo_hash_key_ranges()
        self.demo_handwritten_keys(["user-1", "user-2", "user-3", "user-4", "user-5"])
        self.demo_generated_keys(settings.keygen.default_pattern, settings.keygen.default_count)
        self.demo_generated_keys(PRESETS["vin"], settings.keygen.default_count)
        self.demo_pattern_errors()

        print("\n🎉 演示完成")

    def demo_hash_key_ranges(self):
        """演示哈希键范围"""
        print(f"\n📐 {self.partition_count} 个分区的哈希键范围")
        print("-" * 40)
        for r in partition_hash_ranges(self.partition_count):
            print(f"  #{r.partition_index}: {r.starting_hash_key:032x} - {r.ending_hash_key:032x}")

    def demo_handwritten_keys(self, keys: List[str]):
        """演示固定分区键的映射"""
        print("\n🔑 固定分区键")
        print("-" * 40)
        for record in analyze_partition_keys(keys, self.partition_count):
            print(f"  {record.partition_key:<10} md5={record.digest} -> 分区 #{record.partition_index}")

    def demo_generated_keys(self, pattern: str, count: int):
        """演示随机键的分布"""
        print(f"\n🎲 随机键 {pattern!r} x {count}")
        print("-" * 40)

        keys = generate_many(pattern, count, rng=self.rng)
        print(f"  样例: {', '.join(keys[:3])}")

        records = analyze_partition_keys(keys, self.partition_count)
        summary = summarize_distribution(self.partition_count, [r.partition_index for r in records])

        print(f"  总键数: {summary.total_keys}  平均: {summary.average:.2f}  标准差: {summary.stddev:.2f}")
        print(f"  最大分区: #{summary.max_partition} ({summary.max_count}, {fmt_pct(summary.max_share)})")

        widest = max(summary.counts) or 1
        for i, count in enumerate(summary.counts):
            bar = "█" * round(30 * count / widest)
            print(f"  #{i:<3} {count:>6} {fmt_pct(summary.share(i)):>8} {bar}")

        hotspots = find_hot_partitions(summary, settings.partitioning.hot_partition_factor)
        if hotspots:
            print(f"  ⚠️  热点分区: {[h['partition_index'] for h in hotspots]}")
        else:
            print("  ✅ 没有热点分区")

    def demo_pattern_errors(self):
        """演示不支持的模式"""
        print("\n🚫 不支持的模式")
        print("-" * 40)
        for pattern in ["(a|b)", "a{3,2}", "[z-a]", "\\", "*a", "[^a]"]:
            try:
                compile_pattern(pattern)
                print(f"  {pattern!r}: 编译成功")
            except ShardScopeError as e:
                print(f"  {pattern!r}: {e.error_code} - {e.message}")


if __name__ == "__main__":
    init_logging(settings.logging.level, settings.logging.log_file)
    ShardScopeDemo().run()
