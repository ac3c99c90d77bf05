"""
UPL Lexer (词法分析器)
将 UPL 源代码转换为 token 流。

非法的词素不会中断分析：生成 ERROR token，同时向诊断袋报告一条词法错误。
"""

import logging
from enum import Enum, auto
from dataclasses import dataclass
from typing import List, Optional

from .config import DEFAULT_LIMITS, Limits
from .error import DiagnosticBag, DiagnosticKind

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Token类型枚举"""
    # 关键字
    BEGIN = auto()
    END = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()
    DO = auto()
    WHILE = auto()
    FOR = auto()
    PRINT = auto()

    # 类型
    INT = auto()
    BOOL = auto()

    # 字面量
    TRUE = auto()
    FALSE = auto()
    NUM = auto()

    # 标识符
    ID = auto()

    # 运算符
    EQ = auto()             # ==
    GT = auto()             # >
    GTE = auto()            # >=
    PLUS = auto()           # +
    MUL = auto()            # *
    ASSIGN = auto()         # =

    # 分隔符
    LPAREN = auto()         # (
    RPAREN = auto()         # )
    LBRACE = auto()         # {
    RBRACE = auto()         # }
    SEMICOLON = auto()      # ;

    # 特殊
    EOF = auto()
    ERROR = auto()


@dataclass(frozen=True)
class Token:
    """Token数据类"""
    type: TokenType
    text: str
    line: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.text!r}, line {self.line})"


KEYWORDS = {
    'begin': TokenType.BEGIN,
    'end': TokenType.END,
    'if': TokenType.IF,
    'then': TokenType.THEN,
    'else': TokenType.ELSE,
    'do': TokenType.DO,
    'while': TokenType.WHILE,
    'for': TokenType.FOR,
    'print': TokenType.PRINT,
    'int': TokenType.INT,
    'bool': TokenType.BOOL,
    'true': TokenType.TRUE,
    'false': TokenType.FALSE,
}

SINGLE_CHAR_TOKENS = {
    '+': TokenType.PLUS,
    '*': TokenType.MUL,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    ';': TokenType.SEMICOLON,
}

WHITESPACE = ' \t\n\r\v\f'


def is_letter(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def is_valid_identifier(word: str) -> bool:
    """
    标识符 = 字母开头，后接字母，可选地以一段连续数字结尾。
    数字出现之后不允许再出现字母（如 a1b 非法，ab12 合法）。
    """
    if not word or not is_letter(word[0]):
        return False
    has_digit = False
    for ch in word[1:]:
        if is_digit(ch):
            has_digit = True
        elif not is_letter(ch):
            return False
        elif has_digit:
            return False
    return True


class Lexer:
    """UPL 语言词法分析器"""

    def __init__(self, source: str, diags: DiagnosticBag = None,
                 limits: Limits = DEFAULT_LIMITS):
        self.source = source
        self.diags = diags if diags is not None else DiagnosticBag(limits.max_diagnostics)
        self.limits = limits
        self.pos = 0
        self.line = 1
        self.tokens: List[Token] = []

    def current_char(self) -> Optional[str]:
        """获取当前字符"""
        if self.pos >= len(self.source):
            return None
        return self.source[self.pos]

    def peek_char(self, offset: int = 1) -> Optional[str]:
        """向前查看字符"""
        pos = self.pos + offset
        if pos >= len(self.source):
            return None
        return self.source[pos]

    def advance(self):
        """前进一个字符"""
        if self.pos < len(self.source):
            if self.source[self.pos] == '\n':
                self.line += 1
            self.pos += 1

    def emit(self, token_type: TokenType, text: str, line: int = None):
        text = text[:self.limits.max_lexeme_len]
        self.tokens.append(Token(token_type, text, self.line if line is None else line))

    def emit_error(self, text: str, message: str, line: int):
        self.emit(TokenType.ERROR, text, line)
        self.diags.error(line, message, DiagnosticKind.LEXICAL)

    def skip_whitespace(self):
        """跳过空白字符"""
        while self.current_char() and self.current_char() in WHITESPACE:
            self.advance()

    def skip_comment(self) -> bool:
        """跳过注释，成功跳过返回 True"""
        if self.current_char() != '/':
            return False
        if self.peek_char() == '/':
            # 单行注释，换行符留给 skip_whitespace 计数
            while self.current_char() and self.current_char() != '\n':
                self.advance()
            return True
        if self.peek_char() == '*':
            # 多行注释
            self.advance()  # /
            self.advance()  # *
            prev = None
            while self.current_char():
                ch = self.current_char()
                self.advance()
                if prev == '*' and ch == '/':
                    return True
                prev = ch
            self.diags.error(self.line, "Unterminated block comment", DiagnosticKind.LEXICAL)
            return True
        return False

    def read_number(self):
        """读取数字字面量"""
        start = self.pos
        while self.current_char() and is_digit(self.current_char()):
            self.advance()
        self.emit(TokenType.NUM, self.source[start:self.pos])

    def read_word(self):
        """读取关键字或标识符"""
        start_line = self.line
        start = self.pos
        while self.current_char() and (is_letter(self.current_char()) or is_digit(self.current_char())):
            self.advance()
        word = self.source[start:self.pos][:self.limits.max_lexeme_len]

        token_type = KEYWORDS.get(word)
        if token_type is not None:
            self.emit(token_type, word, start_line)
        elif is_valid_identifier(word):
            self.emit(TokenType.ID, word, start_line)
        else:
            self.emit_error(word, f"Invalid identifier: {word}", start_line)

    def tokenize(self) -> List[Token]:
        """执行词法分析，返回以 EOF 结尾的 token 列表"""
        while self.current_char():
            self.skip_whitespace()

            if not self.current_char():
                break

            # 跳过注释
            if self.skip_comment():
                continue

            start_line = self.line
            char = self.current_char()

            # 数字
            if is_digit(char):
                self.read_number()

            # 标识符或关键字
            elif is_letter(char):
                self.read_word()

            # 运算符和分隔符
            elif char == '=':
                self.advance()
                if self.current_char() == '=':
                    self.advance()
                    self.emit(TokenType.EQ, '==', start_line)
                else:
                    self.emit(TokenType.ASSIGN, '=', start_line)

            elif char == '>':
                self.advance()
                if self.current_char() == '=':
                    self.advance()
                    self.emit(TokenType.GTE, '>=', start_line)
                else:
                    self.emit(TokenType.GT, '>', start_line)

            elif char in SINGLE_CHAR_TOKENS:
                self.advance()
                self.emit(SINGLE_CHAR_TOKENS[char], char, start_line)

            else:
                # 单独的 '/'、'<' 以及其它所有字符
                self.advance()
                self.emit_error(char, f"Unsupported operator: {char}", start_line)

        # 添加EOF token
        self.tokens.append(Token(TokenType.EOF, '', self.line))
        logger.debug("lexed %d tokens over %d line(s)", len(self.tokens), self.line)
        return self.tokens


def tokenize(source: str, diags: DiagnosticBag = None,
             limits: Limits = DEFAULT_LIMITS) -> List[Token]:
    return Lexer(source, diags, limits).tokenize()


class TokenStream:
    """
    带游标的 token 序列，供语法分析器读取。
    游标不会越过末尾的 EOF token。
    """

    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type != TokenType.EOF:
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 1) -> Token:
        """向前查看token，越界时返回 EOF"""
        pos = self.pos + offset
        if pos < len(self.tokens):
            return self.tokens[pos]
        return self.tokens[-1]

    def advance(self) -> Token:
        """前进一个token，返回被消耗的 token"""
        token = self.current
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return token

    def skip_line(self) -> int:
        """跳过当前 token 所在物理行上的全部 token，返回跳过的数量"""
        line = self.current.line
        start = self.pos
        while self.pos < len(self.tokens) - 1 and self.tokens[self.pos].line == line:
            self.pos += 1
        return self.pos - start

    @property
    def at_end(self) -> bool:
        return self.current.type == TokenType.EOF

    def __len__(self):
        return len(self.tokens)
