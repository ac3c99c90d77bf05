"""
UPL AST Transformer
===================
将 Lark 参考文法生成的 CST（具体语法树）转换为 uplcc.tree.nodes 中的
AST 节点，使参考分析器与递归下降分析器的结果可以直接比较。

使用 Lark 的 Transformer 机制（非递归版本，长表达式链不会爆栈）：
每个方法对应 upl.lark 中一条规则，
接收已转换的子节点，返回 AST 节点对象。

使用方式：
    transformer = UplTransformer()
    ast = transformer.transform(lark_tree)
"""

from lark import Token, v_args
from lark.visitors import Transformer_NonRecursive

from ..semantic.symbol import VarType
from .nodes import (
    Prog, Stmts,
    IfStmt, IfThen, ElseOpt, DoWhileStmt, PrintStmt,
    DeclStmt, TypeSpec, InitDecl, AssignStmt,
    ForStmt, ForInitDecl, ForInitAssign, Update,
    BinaryOp, Identifier, Name, NumberLiteral, BoolLiteral,
)


def _str(tok) -> str:
    """Token → str"""
    return str(tok)


@v_args(inline=True)
class UplTransformer(Transformer_NonRecursive):
    """
    将 Lark CST 转换为 UPL AST。
    规则名与 upl.lark 中的产生式名（或别名）保持一致。
    """

    # ── 顶层 & 语句块 ───────────────────────────────────────────────────────

    def prog(self, stmts):
        return Prog(body=stmts)

    def stmts(self, *items):
        return Stmts(items=list(items))

    # ── 控制流 ──────────────────────────────────────────────────────────────

    def if_stmt(self, if_then, else_opt):
        # [else_opt] 缺省时 Lark 给出 None 占位
        return IfStmt(if_then=if_then, else_opt=else_opt)

    def if_then(self, cond, body):
        return IfThen(cond=cond, body=body)

    def else_opt(self, body):
        return ElseOpt(body=body)

    def do_while_stmt(self, body, cond):
        return DoWhileStmt(body=body, cond=cond)

    def for_stmt(self, init, cond, update, body):
        return ForStmt(init=init, cond=cond, update=update, body=body)

    def for_init_decl(self, type_spec, decl):
        return ForInitDecl(type_spec=type_spec, decl=decl)

    def for_init_assign(self, name, value):
        return ForInitAssign(target=Name(_str(name)), value=value)

    def update(self, name, value):
        return Update(target=Name(_str(name)), value=value)

    # ── 声明 & 简单语句 ─────────────────────────────────────────────────────

    def print_stmt(self, expr):
        return PrintStmt(expr=expr)

    def decl_stmt(self, type_spec, decl):
        return DeclStmt(type_spec=type_spec, decl=decl)

    def type_spec(self, tok: Token):
        return TypeSpec(vtype=VarType(_str(tok)))

    def init_decl(self, name, init):
        return InitDecl(target=Name(_str(name)), init=init)

    def assign_stmt(self, name, value):
        return AssignStmt(target=Name(_str(name)), value=value)

    # ── 表达式 ──────────────────────────────────────────────────────────────

    def eq(self, left, right):
        return BinaryOp(op='==', left=left, right=right)

    def gt(self, left, right):
        return BinaryOp(op='>', left=left, right=right)

    def gte(self, left, right):
        return BinaryOp(op='>=', left=left, right=right)

    def add(self, left, right):
        return BinaryOp(op='+', left=left, right=right)

    def mul(self, left, right):
        return BinaryOp(op='*', left=left, right=right)

    def var(self, tok):
        return Identifier(name=_str(tok))

    def num(self, tok):
        return NumberLiteral(text=_str(tok))

    def true(self):
        return BoolLiteral(value=True)

    def false(self):
        return BoolLiteral(value=False)
