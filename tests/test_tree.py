"""Tests for AST node labels, traversal and printing."""

from uplcc.semantic.symbol import VarType
from uplcc.tree.nodes import (
    BinaryOp,
    BoolLiteral,
    DeclStmt,
    ElseOpt,
    Identifier,
    IfStmt,
    IfThen,
    InitDecl,
    Name,
    NumberLiteral,
    PrintStmt,
    Prog,
    Stmts,
    TypeSpec,
    walk,
    pretty,
)


def _scenario_a() -> Prog:
    return Prog(
        body=Stmts(
            items=[
                DeclStmt(
                    type_spec=TypeSpec(VarType.INT),
                    decl=InitDecl(target=Name("x"), init=NumberLiteral("5")),
                ),
                PrintStmt(expr=Identifier("x")),
            ]
        )
    )


class TestLabels:
    def test_payload_nodes_render_like_label_tree(self) -> None:
        assert Identifier("count").label == "Id"
        assert [c.label for c in Identifier("count").children()] == ["count"]
        assert NumberLiteral("42").label == "Num"
        assert [c.label for c in NumberLiteral("42").children()] == ["42"]
        assert Name("x").label == "x"
        assert Name("x").is_leaf

    def test_literal_and_type_labels(self) -> None:
        assert BoolLiteral(True).label == "True"
        assert BoolLiteral(False).label == "False"
        assert TypeSpec(VarType.BOOL).label == "Type_bool"

    def test_operator_labels(self) -> None:
        one = NumberLiteral("1")
        labels = [BinaryOp(op, one, one).label for op in ["==", ">", ">=", "+", "*"]]
        assert labels == ["EqExpr", "Gt", "Gte", "AddExpr", "MulExpr"]

    def test_optional_children_are_omitted(self) -> None:
        if_then = IfThen(cond=BoolLiteral(True), body=Stmts())
        assert IfStmt(if_then=if_then).children() == (if_then,)
        with_else = IfStmt(if_then=if_then, else_opt=ElseOpt(body=Stmts()))
        assert len(with_else.children()) == 2
        assert InitDecl(target=Name("x")).children() == (Name("x"),)

    def test_empty_block_is_leaf(self) -> None:
        assert Stmts().is_leaf
        assert Stmts().label == "Stmts"


class TestPrinting:
    def test_pretty_scenario_a(self) -> None:
        assert pretty(_scenario_a()) == "\n".join([
            "Prog",
            "  Stmts",
            "    DeclStmt",
            "      Type_int",
            "      InitDecl",
            "        x",
            "        Num",
            "          5",
            "    PrintStmt",
            "      Id",
            "        x",
        ])

    def test_walk_is_preorder_with_depth(self) -> None:
        labels = [(depth, node.label) for depth, node in walk(_scenario_a())]
        assert labels[:3] == [(0, "Prog"), (1, "Stmts"), (2, "DeclStmt")]
        assert labels[-1] == (4, "x")

    def test_long_left_deep_chain(self) -> None:
        terms = 5000
        expr = NumberLiteral("1")
        for _ in range(terms - 1):
            expr = BinaryOp("+", expr, NumberLiteral("1"))
        lines = pretty(Prog(body=Stmts(items=[PrintStmt(expr=expr)]))).splitlines()
        assert len(lines) == 3 + (terms - 1) + 2 * terms
        assert lines[3] == "      AddExpr"
        assert lines[-2:] == ["        Num", "          1"]
        depths = [depth for depth, _ in walk(expr)]
        assert max(depths) == terms
        assert _scenario_a() == _scenario_a()
