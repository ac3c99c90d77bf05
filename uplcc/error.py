"""
UPL 诊断信息体系
================
收集词法 / 语法 / 语义错误，支持"继续分析模式"（报错后不立即中断，
尽量多检测错误）。

去重规则：
  - 袋子满了以后，新的诊断直接丢弃
  - 与最近一条被接受的诊断同一行的，丢弃
  - 完全相同的 (line, message) 已存在的，丢弃
输出时每一行只打印第一条诊断（first_per_line）。
"""

from dataclasses import dataclass
from enum import Enum, auto

from .config import DEFAULT_LIMITS


class DiagnosticKind(Enum):
    LEXICAL  = auto()
    SYNTAX   = auto()
    SEMANTIC = auto()


@dataclass(frozen=True)
class Diagnostic:
    """一条诊断信息"""
    line:    int
    message: str
    kind:    DiagnosticKind = DiagnosticKind.SYNTAX

    def __str__(self):
        return f"- Error at line {self.line}: {self.message}"


class FrontendError(Exception):
    """与源码内容无关的致命错误（文件不存在、无法解码等）"""


class DiagnosticBag:
    """
    诊断信息收集袋。
    词法分析器、语法分析器和符号表共用同一个袋子，
    分析结束后统一输出。
    """
    def __init__(self, capacity: int = DEFAULT_LIMITS.max_diagnostics):
        self.capacity = capacity
        self._diags: list[Diagnostic] = []
        self._last_line = 0

    # ── 添加诊断 ────────────────────────────────────────────────────────────

    def error(self, line: int, message: str,
              kind: DiagnosticKind = DiagnosticKind.SYNTAX) -> bool:
        """记录一条诊断，被接受时返回 True"""
        if len(self._diags) >= self.capacity:
            return False
        if line == self._last_line:
            return False
        if any(d.line == line and d.message == message for d in self._diags):
            return False
        self._diags.append(Diagnostic(line, message, kind))
        self._last_line = line
        return True

    def forget_last_line(self):
        """清除"最近出错行"标记（语法分析器在新语句开始时调用）"""
        self._last_line = 0

    # ── 查询 ────────────────────────────────────────────────────────────────

    @property
    def last_line(self) -> int:
        return self._last_line

    @property
    def has_errors(self) -> bool:
        return bool(self._diags)

    @property
    def count(self) -> int:
        return len(self._diags)

    @property
    def is_full(self) -> bool:
        return len(self._diags) >= self.capacity

    def __iter__(self):
        return iter(self._diags)

    def __len__(self):
        return len(self._diags)

    def first_per_line(self) -> list[Diagnostic]:
        """按收集顺序返回诊断，每个行号只保留第一条"""
        seen: set[int] = set()
        result = []
        for d in self._diags:
            if d.line in seen:
                continue
            seen.add(d.line)
            result.append(d)
        return result

    # ── 输出 ────────────────────────────────────────────────────────────────

    def report(self) -> str:
        return '\n'.join(str(d) for d in self.first_per_line())
