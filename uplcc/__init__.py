"""
uplcc - UPL 语言编译器前端
==========================
模块结构：
  uplcc/
    __init__.py          本文件：公共 API
    config.py            可调上限（Limits）
    error.py             诊断信息系统
    lexer.py             词法分析器 & token 流
    parser.py            递归下降语法分析器（含按行错误恢复）
    pipeline.py          词法 → 语法 流水线
    cli.py               命令行入口
    reference.py         Lark 参考文法分析器
    compare.py           前端 / 参考文法批量对比
    upl.lark             参考文法
    tree/
      nodes.py           AST 节点定义 & 打印
      transformer.py     Lark CST → AST 转换器
    semantic/
      symbol.py          扁平符号表

快速使用示例：

    from uplcc import UplFrontend

    result = UplFrontend().process_string("begin int x = 5; print(x); end")
    print(result.render())
"""

from .pipeline import UplFrontend, FrontendResult
from .config import Limits, DEFAULT_LIMITS
from .error import Diagnostic, DiagnosticBag, DiagnosticKind, FrontendError
from .lexer import Token, TokenType, tokenize
from .parser import Parser
from .semantic.symbol import Symbol, SymbolTable, VarType

__all__ = [
    'UplFrontend', 'FrontendResult',
    'Limits', 'DEFAULT_LIMITS',
    'Diagnostic', 'DiagnosticBag', 'DiagnosticKind', 'FrontendError',
    'Token', 'TokenType', 'tokenize',
    'Parser',
    'Symbol', 'SymbolTable', 'VarType',
]
