"""
UPL Parser (语法分析器)
将 token 流转换为抽象语法树(AST)。

预测式递归下降：每个文法非终结符对应一个 parse_* 方法，全程 LL(1)，
唯一的例外是语句开头的标识符要多看一个 token 判断是否为赋值。
声明检查（先声明后使用、重复声明）在分析过程中同步完成。

错误恢复（panic mode，以物理行为粒度）：
  出错的那一层报告一条诊断，跳过当前 token 所在行的全部剩余 token，
  然后抛出 ParseAbort 放弃整个结构；最近的语句循环捕获它后继续寻找
  下一条语句、'}'、'end' 或 EOF。上层不会再次跳行。
"""

import logging
import sys
from contextlib import contextmanager
from typing import List, Optional, Tuple

from .config import DEFAULT_LIMITS, Limits
from .error import DiagnosticBag, DiagnosticKind
from .lexer import Token, TokenStream, TokenType
from .semantic.symbol import SymbolTable, VarType
from .tree.nodes import (
    ASTNode, Prog, Stmts,
    IfStmt, IfThen, ElseOpt, DoWhileStmt, PrintStmt,
    DeclStmt, TypeSpec, InitDecl, AssignStmt,
    ForStmt, ForInitDecl, ForInitAssign, Update,
    BinaryOp, Identifier, Name, NumberLiteral, BoolLiteral,
)

logger = logging.getLogger(__name__)

# 可以结束一个语句块的 token
BLOCK_END = (TokenType.END, TokenType.RBRACE, TokenType.EOF)

TYPE_TOKENS = {
    TokenType.INT:  VarType.INT,
    TokenType.BOOL: VarType.BOOL,
}

# 分析期间的递归上限，约可容纳 600 层括号
RECURSION_LIMIT = 4000


@contextmanager
def _recursion_limit(limit: int):
    """临时把递归上限提高到 limit（已经更高时不变），退出时恢复"""
    old = sys.getrecursionlimit()
    sys.setrecursionlimit(max(old, limit))
    try:
        yield
    finally:
        sys.setrecursionlimit(old)


class ParseAbort(Exception):
    """当前结构已放弃（诊断已报告，游标已同步到下一行）"""


class Parser:
    """UPL 语法分析器"""

    def __init__(self, tokens: List[Token], diags: DiagnosticBag = None,
                 symbols: SymbolTable = None, limits: Limits = DEFAULT_LIMITS):
        self.stream = TokenStream(tokens)
        self.limits = limits
        self.diags = diags if diags is not None else DiagnosticBag(limits.max_diagnostics)
        self.symbols = symbols if symbols is not None else SymbolTable(self.diags, limits.max_symbols)

    # ── token 操作 ──────────────────────────────────────────────────────────

    @property
    def current(self) -> Token:
        return self.stream.current

    def advance(self) -> Token:
        return self.stream.advance()

    def check(self, *types: TokenType) -> bool:
        return self.current.type in types

    def skip_to_sync(self):
        """跳过当前物理行上剩余的全部 token"""
        line = self.current.line
        skipped = self.stream.skip_line()
        logger.debug("recovery: skipped %d token(s) on line %d", skipped, line)

    def fail(self, message: str, line: int = None,
             kind: DiagnosticKind = DiagnosticKind.SYNTAX):
        """报告诊断、同步到下一行并放弃当前结构"""
        self.diags.error(self.current.line if line is None else line, message, kind)
        self.skip_to_sync()
        raise ParseAbort(message)

    def expect(self, token_type: TokenType, message: str) -> Token:
        """期望特定类型的token，不匹配时进入错误恢复"""
        if self.current.type != token_type:
            self.fail(message)
        return self.advance()

    def require_declared(self, token: Token):
        if not self.symbols.is_declared(token.text):
            self.fail(f"Undeclared variable: {token.text}", line=token.line,
                      kind=DiagnosticKind.SEMANTIC)

    # ── 入口 ────────────────────────────────────────────────────────────────

    def parse(self) -> Optional[Prog]:
        """
        解析整个程序；顶层结构失败时返回 None。

        每层括号要经过 expr → eq → rel → add → mul → prim 六个栈帧，
        分析期间临时放宽解释器的递归上限；仍然超出时报告 "Nesting too deep"。
        """
        with _recursion_limit(RECURSION_LIMIT):
            try:
                return self.parse_prog()
            except ParseAbort:
                return None
            except RecursionError:
                logger.debug("recursion limit hit on line %d", self.current.line)
                self.diags.error(self.current.line, "Nesting too deep")
                return None

    @property
    def at_end(self) -> bool:
        return self.stream.at_end

    # ── 程序 & 语句块 ───────────────────────────────────────────────────────

    def parse_prog(self) -> Prog:
        self.expect(TokenType.BEGIN, "Expected 'begin'")
        body = self.parse_stmts()
        self.expect(TokenType.END, "Expected 'end'")
        return Prog(body=body)

    def parse_stmts(self) -> Stmts:
        """解析语句序列，直到 'end'、'}' 或 EOF；失败的语句被丢弃"""
        items: List[ASTNode] = []
        while not self.check(*BLOCK_END):
            if len(items) >= self.limits.max_statements:
                logger.debug("statement limit %d reached on line %d",
                             self.limits.max_statements, self.current.line)
                self.diags.error(self.current.line, "Too many statements",
                                 DiagnosticKind.SEMANTIC)
                self.skip_to_sync()
                break
            try:
                items.append(self.parse_stmt())
            except ParseAbort:
                continue
        return Stmts(items=items)

    def parse_stmt(self) -> ASTNode:
        """解析语句"""
        token = self.current
        if token.line != self.diags.last_line:
            self.diags.forget_last_line()

        if token.type == TokenType.IF:
            return self.parse_if_stmt()
        elif token.type == TokenType.DO:
            return self.parse_do_while_stmt()
        elif token.type == TokenType.PRINT:
            return self.parse_print_stmt()
        elif token.type in TYPE_TOKENS:
            return self.parse_decl_stmt()
        elif token.type == TokenType.FOR:
            return self.parse_for_stmt()
        elif token.type == TokenType.ID:
            # 标识符开头：只有下一个 token 是 '=' 时才是赋值语句
            if self.stream.peek().type == TokenType.ASSIGN:
                return self.parse_assign_stmt()
            self.fail("Expected 'int' or 'bool' for declaration or '=' for assignment")
        else:
            self.fail("Expected 'int', 'bool', identifier, or statement keyword")

    # ── 控制流语句 ──────────────────────────────────────────────────────────

    def parse_if_stmt(self) -> IfStmt:
        if_then = self.parse_if_then()
        else_opt = None
        if self.check(TokenType.ELSE):
            try:
                else_opt = self.parse_else_opt()
            except ParseAbort:
                # else 分支失败只丢掉 else，诊断已记录
                else_opt = None
        return IfStmt(if_then=if_then, else_opt=else_opt)

    def parse_if_then(self) -> IfThen:
        self.expect(TokenType.IF, "Expected 'if'")
        self.expect(TokenType.LPAREN, "Expected '('")
        cond = self.parse_expr()
        self.expect(TokenType.RPAREN, "Expected ')'")
        self.expect(TokenType.THEN, "Expected 'then'")
        self.expect(TokenType.LBRACE, "Expected '{'")
        body = self.parse_stmts()
        self.expect(TokenType.RBRACE, "Expected '}'")
        return IfThen(cond=cond, body=body)

    def parse_else_opt(self) -> ElseOpt:
        self.expect(TokenType.ELSE, "Expected 'else'")
        self.expect(TokenType.LBRACE, "Expected '{'")
        body = self.parse_stmts()
        self.expect(TokenType.RBRACE, "Expected '}'")
        return ElseOpt(body=body)

    def parse_do_while_stmt(self) -> DoWhileStmt:
        self.expect(TokenType.DO, "Expected 'do'")
        self.expect(TokenType.LBRACE, "Expected '{'")
        body = self.parse_stmts()
        self.expect(TokenType.RBRACE, "Expected '}'")
        self.expect(TokenType.WHILE, "Expected 'while'")
        self.expect(TokenType.LPAREN, "Expected '('")
        cond = self.parse_expr()
        self.expect(TokenType.RPAREN, "Expected ')'")
        self.expect(TokenType.SEMICOLON, "Expected ';'")
        return DoWhileStmt(body=body, cond=cond)

    def parse_for_stmt(self) -> ForStmt:
        self.expect(TokenType.FOR, "Expected 'for'")
        self.expect(TokenType.LPAREN, "Expected '('")

        if self.check(*TYPE_TOKENS):
            type_spec = self.parse_type()
            decl, _ = self.parse_init_decl(type_spec.vtype)
            init = ForInitDecl(type_spec=type_spec, decl=decl)
        elif self.check(TokenType.ID):
            target = self.current
            self.require_declared(target)
            self.advance()
            self.expect(TokenType.ASSIGN, "Expected '='")
            init = ForInitAssign(target=Name(target.text), value=self.parse_expr())
        else:
            self.fail("Expected 'int', 'bool', or identifier for for-loop initialization")
        self.expect(TokenType.SEMICOLON, "Expected ';' after for-loop initialization")

        cond = self.parse_expr()
        self.expect(TokenType.SEMICOLON, "Expected ';' after for-loop condition")

        update = self.parse_update()
        self.expect(TokenType.RPAREN, "Expected ')' after for-loop update")
        self.expect(TokenType.LBRACE, "Expected '{' for for-loop body")
        body = self.parse_stmts()
        self.expect(TokenType.RBRACE, "Expected '}' after for-loop body")
        return ForStmt(init=init, cond=cond, update=update, body=body)

    def parse_update(self) -> Update:
        if not self.check(TokenType.ID):
            self.fail("Expected identifier in for-loop update")
        target = self.current
        self.require_declared(target)
        self.advance()
        self.expect(TokenType.ASSIGN, "Expected '=' in for-loop update")
        return Update(target=Name(target.text), value=self.parse_expr())

    # ── 简单语句 ────────────────────────────────────────────────────────────

    def parse_print_stmt(self) -> PrintStmt:
        self.expect(TokenType.PRINT, "Expected 'print'")
        self.expect(TokenType.LPAREN, "Expected '('")
        expr = self.parse_expr()
        self.expect(TokenType.RPAREN, "Expected ')'")
        self.expect(TokenType.SEMICOLON, "Expected ';'")
        return PrintStmt(expr=expr)

    def parse_decl_stmt(self) -> DeclStmt:
        type_spec = self.parse_type()
        decl, decl_line = self.parse_init_decl(type_spec.vtype)
        if not self.check(TokenType.SEMICOLON):
            # 缺分号报告在被声明的标识符所在行
            self.fail("Expected ';'", line=decl_line)
        self.advance()
        return DeclStmt(type_spec=type_spec, decl=decl)

    def parse_type(self) -> TypeSpec:
        vtype = TYPE_TOKENS.get(self.current.type)
        if vtype is None:
            self.fail("Expected 'int' or 'bool'")
        self.advance()
        return TypeSpec(vtype=vtype)

    def parse_init_decl(self, vtype: VarType) -> Tuple[InitDecl, int]:
        """解析 ID ('=' Expr)? 并登记符号，返回 (节点, 声明行)"""
        name = self.expect(TokenType.ID, "Expected identifier")
        init = None
        if self.check(TokenType.ASSIGN):
            self.advance()
            init = self.parse_expr()
        # 初始化表达式解析完才登记，int x = x; 会报未声明
        self.symbols.declare(name.text, vtype, name.line)
        return InitDecl(target=Name(name.text), init=init), name.line

    def parse_assign_stmt(self) -> AssignStmt:
        if not self.check(TokenType.ID):
            self.fail("Expected identifier")
        target = self.current
        self.require_declared(target)
        self.advance()
        self.expect(TokenType.ASSIGN, "Expected '='")
        value = self.parse_expr()
        self.expect(TokenType.SEMICOLON, "Expected ';'")
        return AssignStmt(target=Name(target.text), value=value)

    # ── 表达式（按优先级从低到高，全部左结合） ────────────────────────────

    def parse_expr(self) -> ASTNode:
        return self.parse_eq_expr()

    def parse_eq_expr(self) -> ASTNode:
        left = self.parse_rel_expr()
        while self.check(TokenType.EQ):
            self.advance()
            left = BinaryOp(op='==', left=left, right=self.parse_rel_expr())
        return left

    def parse_rel_expr(self) -> ASTNode:
        left = self.parse_add_expr()
        while self.check(TokenType.GT, TokenType.GTE):
            op = self.advance().text
            left = BinaryOp(op=op, left=left, right=self.parse_add_expr())
        return left

    def parse_add_expr(self) -> ASTNode:
        left = self.parse_mul_expr()
        while self.check(TokenType.PLUS):
            self.advance()
            left = BinaryOp(op='+', left=left, right=self.parse_mul_expr())
        return left

    def parse_mul_expr(self) -> ASTNode:
        left = self.parse_prim_expr()
        while self.check(TokenType.MUL):
            self.advance()
            left = BinaryOp(op='*', left=left, right=self.parse_prim_expr())
        return left

    def parse_prim_expr(self) -> ASTNode:
        token = self.current

        if token.type == TokenType.ID:
            self.require_declared(token)
            self.advance()
            return Identifier(name=token.text)

        elif token.type == TokenType.NUM:
            self.advance()
            return NumberLiteral(text=token.text)

        elif token.type in (TokenType.TRUE, TokenType.FALSE):
            self.advance()
            return BoolLiteral(value=token.type == TokenType.TRUE)

        elif token.type == TokenType.LPAREN:
            self.advance()
            expr = self.parse_expr()
            self.expect(TokenType.RPAREN, "Expected ')'")
            return expr

        self.fail("Invalid primary expression")
