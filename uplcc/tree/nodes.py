"""
UPL AST 节点定义
================
每个文法结构对应一个节点类。节点通过 label 给出打印用的标签，
通过 children() 给出有序子节点；子节点归父节点独占，不共享。

携带字面数据的节点（Name / Identifier / NumberLiteral）把数据放在
字段里，打印时再还原成与标签树相同的文本：

    Identifier('x')    →  Id
                            x
    NumberLiteral('5') →  Num
                            5
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from ..semantic.symbol import VarType


class ASTNode:
    """所有 AST 节点的公共基类"""

    @property
    def label(self) -> str:
        return type(self).__name__

    def children(self) -> Tuple['ASTNode', ...]:
        return ()

    @property
    def is_leaf(self) -> bool:
        return not self.children()


# ──────────────────────────────────────────────────────────────────────────────
# 叶子 & 表达式节点
# ──────────────────────────────────────────────────────────────────────────────

@dataclass
class Name(ASTNode):
    """声明 / 赋值目标中的裸标识符，标签即变量名"""
    text: str = ''

    @property
    def label(self) -> str:
        return self.text


@dataclass
class Identifier(ASTNode):
    """表达式中引用的变量"""
    name: str = ''

    @property
    def label(self) -> str:
        return 'Id'

    def children(self):
        return (Name(self.name),)


@dataclass
class NumberLiteral(ASTNode):
    text: str = ''

    @property
    def label(self) -> str:
        return 'Num'

    def children(self):
        return (Name(self.text),)


@dataclass
class BoolLiteral(ASTNode):
    value: bool = False

    @property
    def label(self) -> str:
        return 'True' if self.value else 'False'


OP_LABELS = {
    '==': 'EqExpr',
    '>':  'Gt',
    '>=': 'Gte',
    '+':  'AddExpr',
    '*':  'MulExpr',
}


@dataclass
class BinaryOp(ASTNode):
    op:    str = ''
    left:  ASTNode = None
    right: ASTNode = None

    @property
    def label(self) -> str:
        return OP_LABELS[self.op]

    def children(self):
        return (self.left, self.right)


# ──────────────────────────────────────────────────────────────────────────────
# 声明 & 语句节点
# ──────────────────────────────────────────────────────────────────────────────

@dataclass
class TypeSpec(ASTNode):
    vtype: VarType = VarType.INT

    @property
    def label(self) -> str:
        return f"Type_{self.vtype.value}"


@dataclass
class InitDecl(ASTNode):
    target: Name = None
    init:   Optional[ASTNode] = None

    def children(self):
        return (self.target,) if self.init is None else (self.target, self.init)


@dataclass
class DeclStmt(ASTNode):
    type_spec: TypeSpec = None
    decl:      InitDecl = None

    def children(self):
        return (self.type_spec, self.decl)


@dataclass
class AssignStmt(ASTNode):
    target: Name = None
    value:  ASTNode = None

    def children(self):
        return (self.target, self.value)


@dataclass
class PrintStmt(ASTNode):
    expr: ASTNode = None

    def children(self):
        return (self.expr,)


@dataclass
class Stmts(ASTNode):
    """语句块；空块就是没有子节点的 Stmts"""
    items: List[ASTNode] = field(default_factory=list)

    def children(self):
        return tuple(self.items)


@dataclass
class IfThen(ASTNode):
    cond: ASTNode = None
    body: Stmts = None

    def children(self):
        return (self.cond, self.body)


@dataclass
class ElseOpt(ASTNode):
    body: Stmts = None

    def children(self):
        return (self.body,)


@dataclass
class IfStmt(ASTNode):
    if_then:  IfThen = None
    else_opt: Optional[ElseOpt] = None

    def children(self):
        return (self.if_then,) if self.else_opt is None else (self.if_then, self.else_opt)


@dataclass
class DoWhileStmt(ASTNode):
    body: Stmts = None
    cond: ASTNode = None

    def children(self):
        return (self.body, self.cond)


@dataclass
class ForInitDecl(ASTNode):
    """for (int i = 0; ...) 形式的初始化"""
    type_spec: TypeSpec = None
    decl:      InitDecl = None

    @property
    def label(self) -> str:
        return 'ForInit'

    def children(self):
        return (self.type_spec, self.decl)


@dataclass
class ForInitAssign(ASTNode):
    """for (i = 0; ...) 形式的初始化"""
    target: Name = None
    value:  ASTNode = None

    @property
    def label(self) -> str:
        return 'ForInit'

    def children(self):
        return (self.target, self.value)


@dataclass
class Update(ASTNode):
    target: Name = None
    value:  ASTNode = None

    def children(self):
        return (self.target, self.value)


@dataclass
class ForStmt(ASTNode):
    init:   ASTNode = None     # ForInitDecl | ForInitAssign
    cond:   ASTNode = None
    update: Update = None
    body:   Stmts = None

    def children(self):
        return (self.init, self.cond, self.update, self.body)


@dataclass
class Prog(ASTNode):
    body: Stmts = field(default_factory=Stmts)

    def children(self):
        return (self.body,)


# ──────────────────────────────────────────────────────────────────────────────
# 遍历 & 打印
# ──────────────────────────────────────────────────────────────────────────────

def walk(node: ASTNode, depth: int = 0) -> Iterator[Tuple[int, ASTNode]]:
    """
    前序遍历，产出 (深度, 节点)。
    使用显式栈而不是递归：左结合的长表达式会形成很深的 BinaryOp 链。
    """
    stack = [(depth, node)]
    while stack:
        d, n = stack.pop()
        yield d, n
        # 逆序压栈，保证按原顺序弹出
        for child in reversed(n.children()):
            stack.append((d + 1, child))


def pretty(node: ASTNode, indent: str = '  ') -> str:
    """每行一个标签，每深一层缩进两个空格"""
    return '\n'.join(f"{indent * depth}{n.label}" for depth, n in walk(node))
