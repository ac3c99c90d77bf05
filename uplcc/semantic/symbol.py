"""
UPL 符号表
==========
扁平（单作用域）符号表：整个程序只有一个全局作用域，
没有嵌套、遮蔽和删除，一次分析内只增不减。

声明冲突、容量超限都写入诊断袋，不抛异常。
"""

from enum import Enum

from ..config import DEFAULT_LIMITS
from ..error import DiagnosticBag, DiagnosticKind


class VarType(Enum):
    INT  = 'int'
    BOOL = 'bool'


class Symbol:
    """
    符号表条目。

    Attributes:
        name:   变量名
        vtype:  声明类型（VarType）
        line:   声明所在行
    """
    def __init__(self, name: str, vtype: VarType, line: int):
        self.name  = name
        self.vtype = vtype
        self.line  = line

    def __eq__(self, other):
        if not isinstance(other, Symbol):
            return NotImplemented
        return (self.name, self.vtype, self.line) == (other.name, other.vtype, other.line)

    def __repr__(self):
        return f"Symbol({self.vtype.value} {self.name!r} @{self.line})"


class SymbolTable:
    """单作用域符号表"""

    def __init__(self, diags: DiagnosticBag, capacity: int = DEFAULT_LIMITS.max_symbols):
        self.diags = diags
        self.capacity = capacity
        self._table: dict[str, Symbol] = {}

    # ── 符号操作 ────────────────────────────────────────────────────────────

    def declare(self, name: str, vtype: VarType, line: int) -> bool:
        """插入新符号；表满或重复定义时报告诊断并返回 False"""
        if len(self._table) >= self.capacity:
            self.diags.error(line, "Too many variables declared", DiagnosticKind.SEMANTIC)
            return False
        if name in self._table:
            self.diags.error(line, f"Variable {name} already declared", DiagnosticKind.SEMANTIC)
            return False
        self._table[name] = Symbol(name, vtype, line)
        return True

    def is_declared(self, name: str) -> bool:
        return name in self._table

    def lookup(self, name: str) -> Symbol | None:
        return self._table.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._table

    def __iter__(self):
        return iter(self._table.values())

    def __len__(self):
        return len(self._table)

    # ── 调试辅助 ────────────────────────────────────────────────────────────

    def dump(self) -> str:
        lines = ["[global]"]
        for sym in self._table.values():
            lines.append(f"  {sym}")
        return '\n'.join(lines)
