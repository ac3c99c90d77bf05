"""
UPL 分析流水线
==============
将词法分析 → 语法分析（含声明检查）串联为一个高层接口。
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_LIMITS, Limits
from .error import DiagnosticBag, FrontendError
from .lexer import Lexer, Token
from .parser import Parser
from .semantic.symbol import SymbolTable
from .tree.nodes import Prog, pretty

logger = logging.getLogger(__name__)

SYNTAX_OK = "- source code has correct syntax: yes"
SYNTAX_BAD = "- source code has correct syntax: no"


# ─── 结果对象 ──────────────────────────────────────────────────────────────────

@dataclass
class FrontendResult:
    """分析流水线的输出"""
    ast:          Optional[Prog]      # None 表示顶层结构未能建立
    diags:        DiagnosticBag
    symbol_table: SymbolTable
    tokens:       List[Token]
    at_end:       bool = True         # 分析结束时游标是否停在 EOF

    @property
    def success(self) -> bool:
        return self.ast is not None and not self.diags.has_errors and self.at_end

    def render(self) -> str:
        """CLI 输出文本：成功时打印 AST，失败时打印每行第一条诊断"""
        if self.success:
            return f"{SYNTAX_OK}\n{pretty(self.ast)}"
        report = self.diags.report()
        return f"{SYNTAX_BAD}\n{report}" if report else SYNTAX_BAD


# ─── 主流水线 ─────────────────────────────────────────────────────────────────

class UplFrontend:
    """
    UPL 编译器前端。

    主要流程：
      1. Lexer   → token 列表（词法错误写入诊断袋）
      2. Parser  → AST + 符号表（语法 / 声明错误写入同一诊断袋）

    用法::

        frontend = UplFrontend()
        result = frontend.process_file("prog.upl")
        print(result.render())
    """

    def __init__(self, limits: Limits = DEFAULT_LIMITS):
        self.limits = limits

    # ── 分析入口 ───────────────────────────────────────────────────────────

    def process_file(self, path: str | Path) -> FrontendResult:
        """分析单个源文件；文件不可读时抛出 FrontendError"""
        path = Path(path)
        try:
            source = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise FrontendError(f"Could not open file {path}") from e
        return self.process_string(source)

    def process_string(self, source: str) -> FrontendResult:
        """
        分析源码字符串，返回 FrontendResult。
        每次调用都使用全新的诊断袋和符号表，结果只取决于输入。
        """
        diags = DiagnosticBag(self.limits.max_diagnostics)

        # ── Step 1: 词法分析 ─────────────────────────────────────────────
        tokens = Lexer(source, diags, self.limits).tokenize()

        # ── Step 2: 语法分析 + 声明检查 ─────────────────────────────────
        symbols = SymbolTable(diags, self.limits.max_symbols)
        parser = Parser(tokens, diags, symbols, self.limits)
        ast = parser.parse()

        result = FrontendResult(
            ast=ast,
            diags=diags,
            symbol_table=symbols,
            tokens=tokens,
            at_end=parser.at_end,
        )
        logger.debug("parse %s: %d diagnostic(s), %d symbol(s)",
                     "succeeded" if result.success else "failed",
                     len(diags), len(symbols))
        return result

    # ── 调试工具 ───────────────────────────────────────────────────────────

    def tokenize_only(self, source: str) -> List[Token]:
        """仅做词法分析（调试用）"""
        return Lexer(source, DiagnosticBag(self.limits.max_diagnostics), self.limits).tokenize()
