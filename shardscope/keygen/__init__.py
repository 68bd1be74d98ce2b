"""
键生成包
受限正则模式解析与随机分区键生成
"""

from .pattern import *
from .generator import *

__all__ = [
    # 模式解析
    "AtomKind",
    "Literal",
    "CharClass",
    "DigitClass",
    "WordClass",
    "SpaceClass",
    "PatternAtom",
    "PatternPiece",
    "PatternParser",
    "compile_pattern",
    "MAX_REPEAT",

    # 生成器
    "generate_one",
    "generate_many",
    "clamp_count",
    "MAX_GENERATE_COUNT",
    "DEFAULT_PATTERN",
    "PRESETS",
]
