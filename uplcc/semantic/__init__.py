from .symbol import Symbol, SymbolTable, VarType

__all__ = ['Symbol', 'SymbolTable', 'VarType']
