"""
随机键生成器
按编译后的模式采样字符串，用于对分区映射做压力测试
"""

import math
import numbers
import random
from typing import Any, List, Optional, Sequence

from loguru import logger

from .pattern import PatternPiece, compile_pattern


MAX_GENERATE_COUNT = 50000

DEFAULT_PATTERN = "[A-Z0-9]{17}"

PRESETS = {
    "default": DEFAULT_PATTERN,
    # 车辆识别码，不含 I、O、Q
    "vin": "[A-HJ-NPR-Z0-9]{17}",
}


def clamp_count(count: Any) -> int:
    """把生成数量向下取整并限制在 [0, MAX_GENERATE_COUNT]"""
    if isinstance(count, bool) or not isinstance(count, numbers.Real):
        return 0
    if isinstance(count, numbers.Integral):
        value = int(count)
    elif math.isnan(count):
        return 0
    elif math.isinf(count):
        return MAX_GENERATE_COUNT if count > 0 else 0
    else:
        value = math.floor(count)
    return max(0, min(MAX_GENERATE_COUNT, value))


def generate_one(pieces: Sequence[PatternPiece], rng: Optional[random.Random] = None) -> str:
    """生成一个字符串"""
    rng = rng or random
    out = []
    for piece in pieces:
        if piece.min_repeat == piece.max_repeat:
            repeat = piece.min_repeat
        else:
            repeat = rng.randint(piece.min_repeat, piece.max_repeat)

        alphabet = piece.atom.alphabet
        for _ in range(repeat):
            out.append(rng.choice(alphabet))

    return "".join(out)


def generate_many(pattern: str, count: Any, rng: Optional[random.Random] = None) -> List[str]:
    """编译一次模式并独立生成 count 个字符串"""
    pieces = compile_pattern(pattern)
    n = clamp_count(count)

    results = [generate_one(pieces, rng) for _ in range(n)]
    logger.debug("Generated {} keys from pattern {!r}", n, pattern)
    return results
