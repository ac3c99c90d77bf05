"""
UPL 参考分析器
==============
用 Lark（LALR）加载 upl.lark，严格地解析同一语言：
遇到第一个错误即失败，不做恢复，也不检查变量声明。

用于交叉验证递归下降分析器：对两者都接受的程序，AST 应当完全相同。
"""

from __future__ import annotations
from typing import Optional

from lark import Lark, Tree, exceptions as lark_exc

from .tree.nodes import Prog
from .tree.transformer import UplTransformer

GRAMMAR_FILE = "upl.lark"


class ReferenceParseError(Exception):
    """参考文法拒绝了输入"""


def describe_error(e: lark_exc.LarkError) -> str:
    """把 Lark 异常整理成一行可读的描述"""
    if isinstance(e, lark_exc.UnexpectedCharacters):
        return f"UnexpectedCharacters {e.char!r} at line {e.line}, col {e.column}"
    if isinstance(e, lark_exc.UnexpectedToken):
        if e.token.type == '$END':
            return f"UnexpectedEOF, expected one of {sorted(e.expected)}"
        return (f"UnexpectedToken {str(e.token)!r} at line {e.line}, col {e.column}, "
                f"expected one of {sorted(e.expected)}")
    if isinstance(e, lark_exc.UnexpectedEOF):
        return f"UnexpectedEOF, expected one of {sorted(e.expected)}"
    return f"{type(e).__name__}: {e}"


class ReferenceParser:
    """
    用法::

        ref = ReferenceParser()
        ast = ref.parse("begin int x = 1; end")
        err = ref.check(source)      # None 表示通过
    """

    def __init__(self):
        self._parser = Lark.open(
            GRAMMAR_FILE,
            rel_to=__file__,
            parser='lalr',
            maybe_placeholders=True,
            propagate_positions=True,
        )
        self._transformer = UplTransformer()

    def parse_tree(self, source: str) -> Tree:
        """仅做语法分析，返回 Lark Tree（调试用）"""
        try:
            return self._parser.parse(source)
        except lark_exc.LarkError as e:
            raise ReferenceParseError(describe_error(e)) from e

    def parse(self, source: str) -> Prog:
        """语法分析 + AST 转换"""
        return self._transformer.transform(self.parse_tree(source))

    def check(self, source: str) -> Optional[str]:
        """成功返回 None，失败返回错误描述字符串"""
        try:
            self.parse_tree(source)
            return None
        except ReferenceParseError as e:
            return str(e)
