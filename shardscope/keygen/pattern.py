"""
受限正则模式解析
支持字面量、[...] 字符类、\\d \\w \\s 转义和量词；不支持分组与选择
"""

from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union
from dataclasses import dataclass

from loguru import logger

from ..errors import (
    DanglingQuantifier,
    EmptyCharClass,
    InvalidQuantifier,
    InvalidRange,
    UnsupportedSyntax,
    UnterminatedCharClass,
    UnterminatedEscape,
)


# 无上界量词（+ * {n,}）最多额外重复的次数
OPEN_REPEAT_SPAN = 16
MAX_REPEAT = 100000

DIGIT_CHARS = tuple("0123456789")
WORD_CHARS = tuple("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")
SPACE_CHARS = (" ", "\t")

UNSUPPORTED_CHARS = "()|"
QUANTIFIER_CHARS = "{}?+*"
ANCHOR_CHARS = "^$"


class AtomKind(Enum):
    """原子类型"""
    LITERAL = "literal"
    CHAR_CLASS = "charclass"
    DIGIT = "digit"
    WORD = "word"
    SPACE = "space"


@dataclass(frozen=True)
class Literal:
    """字面量字符"""
    value: str
    kind: ClassVar[AtomKind] = AtomKind.LITERAL

    @property
    def alphabet(self) -> Tuple[str, ...]:
        return (self.value,)


@dataclass(frozen=True)
class CharClass:
    """字符类，候选字符可重复（重复即加权）"""
    chars: Tuple[str, ...]
    kind: ClassVar[AtomKind] = AtomKind.CHAR_CLASS

    @property
    def alphabet(self) -> Tuple[str, ...]:
        return self.chars


@dataclass(frozen=True)
class DigitClass:
    kind: ClassVar[AtomKind] = AtomKind.DIGIT

    @property
    def alphabet(self) -> Tuple[str, ...]:
        return DIGIT_CHARS


@dataclass(frozen=True)
class WordClass:
    kind: ClassVar[AtomKind] = AtomKind.WORD

    @property
    def alphabet(self) -> Tuple[str, ...]:
        return WORD_CHARS


@dataclass(frozen=True)
class SpaceClass:
    kind: ClassVar[AtomKind] = AtomKind.SPACE

    @property
    def alphabet(self) -> Tuple[str, ...]:
        return SPACE_CHARS


PatternAtom = Union[Literal, CharClass, DigitClass, WordClass, SpaceClass]


@dataclass(frozen=True)
class PatternPiece:
    """原子及其重复次数范围"""
    atom: PatternAtom
    min_repeat: int = 1
    max_repeat: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.atom.kind.value,
            'alphabet': list(self.atom.alphabet),
            'min_repeat': self.min_repeat,
            'max_repeat': self.max_repeat
        }


_ESCAPE_CLASSES = {
    'd': DigitClass(),
    'w': WordClass(),
    's': SpaceClass(),
}


class PatternParser:
    """单遍、无回溯的模式解析器"""

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.pos = 0

    def parse(self) -> List[PatternPiece]:
        """解析整个模式"""
        for i, ch in enumerate(self.pattern):
            if ch in UNSUPPORTED_CHARS:
                raise UnsupportedSyntax("Groups and alternation are not supported", i)

        pieces = []
        while not self._at_end():
            ch = self.pattern[self.pos]

            if ch in ANCHOR_CHARS:
                self.pos += 1
                continue

            atom = self._parse_atom()
            min_repeat, max_repeat = self._parse_quantifier()
            pieces.append(PatternPiece(atom, min_repeat, max_repeat))

        return pieces

    def _at_end(self, offset: int = 0) -> bool:
        return self.pos + offset >= len(self.pattern)

    def _peek(self, offset: int = 0) -> str:
        if self._at_end(offset):
            return ""
        return self.pattern[self.pos + offset]

    def _parse_atom(self) -> PatternAtom:
        ch = self.pattern[self.pos]

        if ch == "[":
            return self._parse_char_class()

        if ch == "\\":
            return self._parse_escape()

        if ch in QUANTIFIER_CHARS:
            raise DanglingQuantifier(f"Dangling quantifier '{ch}'", self.pos)

        self.pos += 1
        return Literal(ch)

    def _parse_escape(self) -> PatternAtom:
        start = self.pos
        self.pos += 1
        if self._at_end():
            raise UnterminatedEscape("Invalid escape at end of pattern", start)

        esc = self.pattern[self.pos]
        self.pos += 1
        return _ESCAPE_CLASSES.get(esc) or Literal(esc)

    def _parse_char_class(self) -> CharClass:
        start = self.pos
        self.pos += 1

        if self._peek() == "^":
            raise UnsupportedSyntax("Negated character classes ([^...]) are not supported", self.pos)

        chars: List[str] = []
        while not self._at_end():
            ch = self.pattern[self.pos]

            if ch == "]":
                if not chars:
                    raise EmptyCharClass("Empty character class [] is not supported", start)
                self.pos += 1
                return CharClass(tuple(chars))

            if ch == "\\":
                self.pos += 1
                if self._at_end():
                    raise UnterminatedEscape("Invalid escape at end of pattern", self.pos - 1)
                chars.append(self.pattern[self.pos])
                self.pos += 1
                continue

            if not self._at_end(2) and self._peek(1) == "-" and self._peek(2) != "]":
                chars.extend(self._expand_range(ch, self._peek(2)))
                self.pos += 3
                continue

            chars.append(ch)
            self.pos += 1

        raise UnterminatedCharClass("Unterminated character class", start)

    def _expand_range(self, first: str, last: str) -> List[str]:
        start, end = ord(first), ord(last)
        if end < start:
            raise InvalidRange(f"Invalid range {first}-{last}", self.pos)
        return [chr(code) for code in range(start, end + 1)]

    def _parse_quantifier(self) -> Tuple[int, int]:
        """读取量词后缀，没有量词时为 {1,1}"""
        ch = self._peek()

        if ch == "?":
            self.pos += 1
            return 0, 1
        if ch == "+":
            self.pos += 1
            return 1, OPEN_REPEAT_SPAN
        if ch == "*":
            self.pos += 1
            return 0, OPEN_REPEAT_SPAN
        if ch != "{":
            return 1, 1

        start = self.pos
        self.pos += 1

        lower = self._read_number()
        if lower is None:
            raise InvalidQuantifier("Invalid quantifier: expected number after {", start)

        min_repeat = max_repeat = lower
        if self._peek() == ",":
            self.pos += 1
            upper = self._read_number()
            max_repeat = min_repeat + OPEN_REPEAT_SPAN if upper is None else upper

        if self._peek() != "}":
            raise InvalidQuantifier("Invalid quantifier: expected }", self.pos)
        self.pos += 1

        if min_repeat < 0 or max_repeat < min_repeat:
            raise InvalidQuantifier(f"Invalid quantifier bounds {{{min_repeat},{max_repeat}}}", start)
        if max_repeat > MAX_REPEAT:
            raise InvalidQuantifier(f"Quantifier too large (max {MAX_REPEAT})", start)

        return min_repeat, max_repeat

    def _read_number(self) -> Optional[int]:
        digits = []
        while self._peek() in DIGIT_CHARS:
            digits.append(self._peek())
            self.pos += 1

        if not digits:
            return None

        # 位数超过 MAX_REPEAT 的数字按 MAX_REPEAT + 1 处理，避免转换超长字符串
        significant = "".join(digits).lstrip("0") or "0"
        if len(significant) > len(str(MAX_REPEAT)):
            return MAX_REPEAT + 1
        return int(significant)


def compile_pattern(pattern: str) -> List[PatternPiece]:
    """编译模式为有序的 PatternPiece 列表"""
    pieces = PatternParser(pattern).parse()
    logger.debug("Compiled pattern {!r} into {} pieces", pattern, len(pieces))
    return pieces
