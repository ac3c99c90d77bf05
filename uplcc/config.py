"""
UPL 前端的可调上限
==================
词法 / 语法 / 语义各阶段共享的容量限制。
默认值即 UPL 语言约定的上限，可通过 Limits.replace() 调整。
"""

from dataclasses import dataclass, fields, replace as _dc_replace


@dataclass(frozen=True)
class Limits:
    """
    Attributes:
        max_lexeme_len:   单个 token 文本的最大长度（超出部分截断）
        max_statements:   每个语句块内最多的语句数
        max_diagnostics:  诊断信息袋的容量
        max_symbols:      符号表中最多的变量数
    """
    max_lexeme_len:  int = 99
    max_statements:  int = 100
    max_diagnostics: int = 100
    max_symbols:     int = 100

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or value <= 0:
                raise ValueError(f"{f.name} must be a positive integer, got {value!r}")

    def replace(self, **changes) -> 'Limits':
        """返回修改了部分字段的新 Limits（值为 None 的字段保持不变）"""
        changes = {k: v for k, v in changes.items() if v is not None}
        return _dc_replace(self, **changes)


DEFAULT_LIMITS = Limits()
