"""
宽松/严格执行模式
"""

from enum import Enum


class Leniency(Enum):
    """LENIENT: 无法识别的语句、未知表、无法识别的条件静默跳过；
    STRICT: 以上情况抛出EngineError，便于严格测试。"""

    LENIENT = "lenient"
    STRICT = "strict"

    @classmethod
    def from_flag(cls, strict) -> "Leniency":
        if isinstance(strict, str):
            strict = strict.strip().lower() in ("1", "true", "yes", "on", "strict")
        return cls.STRICT if strict else cls.LENIENT
