"""
领域错误
哈希分区与键生成器抛出的所有错误
"""
from typing import Optional


class ShardScopeError(Exception):
    """领域错误基类"""

    def __init__(self, message: str, error_code: str = None):
        self.message = message
        self.error_code = error_code or type(self).__name__
        super().__init__(self.message)


class InvalidDigestFormat(ShardScopeError):
    """摘要不是32位十六进制字符串"""
    pass


class InvalidPartitionCount(ShardScopeError):
    """分区数不是有限正数"""
    pass


class InvalidHashKey(ShardScopeError):
    """哈希键超出128位键空间"""
    pass


class PatternError(ShardScopeError):
    """模式解析错误"""

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position
        if position is not None:
            message = f"{message} (at position {position})"
        super().__init__(message)


class UnsupportedSyntax(PatternError):
    """分组、选择或取反字符类"""
    pass


class EmptyCharClass(PatternError):
    pass


class InvalidRange(PatternError):
    pass


class UnterminatedCharClass(PatternError):
    pass


class UnterminatedEscape(PatternError):
    pass


class DanglingQuantifier(PatternError):
    """量词前没有原子"""
    pass


class InvalidQuantifier(PatternError):
    """量词格式错误或越界"""
    pass
