from __future__ import annotations

import dataclasses
import sys

import pytest

from expr_toolkit import (
    BinaryOp,
    Number,
    UnaryFunction,
    Variable,
    clone,
    collect_variables,
    count_nodes,
    make_unary_function,
    parse_postfix,
    release,
    structurally_equal,
    tree_depth,
)
from expr_toolkit.nodes import (
    fold_tree,
    function_code_from_name,
    function_name_from_code,
    is_number,
    iter_nodes,
    rebuild_node,
)


def test_number_values_are_stored_as_floats() -> None:
    number = Number(3)
    assert isinstance(number.value, float)
    assert number.value == 3.0


@pytest.mark.parametrize("name", ["A", "ab", "", "1", 5])
def test_variable_names_must_be_one_lowercase_letter(name) -> None:
    with pytest.raises(ValueError):
        Variable(name)


def test_binary_op_rejects_unknown_operators() -> None:
    with pytest.raises(ValueError):
        BinaryOp("%", Number(1), Number(2))


def test_function_codes_and_names() -> None:
    assert function_code_from_name("sin") == "s"
    assert function_code_from_name("l") == "l"
    assert function_name_from_code("t") == "tan"
    assert function_name_from_code("q") == "func?"
    with pytest.raises(ValueError):
        function_code_from_name("exp")
    with pytest.raises(ValueError):
        UnaryFunction("q", Number(1))
    assert make_unary_function("cos", Number(0)).name == "cos"


def test_nodes_are_immutable_and_compare_by_identity() -> None:
    first, second = Number(1), Number(1)

    with pytest.raises(dataclasses.FrozenInstanceError):
        first.value = 2.0  # type: ignore[misc]
    assert first != second
    assert len({first, second}) == 2
    assert structurally_equal(first, second)


def test_structural_equality_uses_an_epsilon_for_numbers() -> None:
    assert structurally_equal(Number(1.0), Number(1.0 + 1e-14))
    assert not structurally_equal(Number(1.0), Number(1.0 + 1e-6))
    assert structurally_equal(Number(1.0), Number(1.0 + 1e-6), eps=1e-3)


def test_structural_equality_checks_shape_and_labels() -> None:
    assert structurally_equal(parse_postfix("ab+"), parse_postfix("ab+"))
    assert not structurally_equal(parse_postfix("ab+"), parse_postfix("ba+"))
    assert not structurally_equal(parse_postfix("ab+"), parse_postfix("ab-"))
    assert not structurally_equal(parse_postfix("a"), parse_postfix("1"))
    assert not structurally_equal(parse_postfix("a"), None)
    assert structurally_equal(None, None)


def test_counting_depth_and_variables() -> None:
    tree = make_unary_function("sin", parse_postfix("ab+c*"))

    assert count_nodes(tree) == 6
    assert tree_depth(tree) == 4
    assert collect_variables(tree) == frozenset("abc")
    assert count_nodes(None) == 0
    assert tree_depth(None) == 0


def test_iteration_is_preorder() -> None:
    tree = parse_postfix("ab+c*")
    labels = [n.op if isinstance(n, BinaryOp) else n.name for n in iter_nodes(tree)]
    assert labels == ["*", "+", "a", "b", "c"]


def test_clone_and_release() -> None:
    tree = parse_postfix("12+")
    copy = clone(tree)

    assert copy is not tree
    assert copy.left is not tree.left
    assert structurally_equal(copy, tree)
    assert release(copy) == 3
    assert release(None) == 0
    assert clone(None) is None
    assert is_number(tree.left)
    assert not is_number(tree)


def _label(node) -> str:
    if isinstance(node, BinaryOp):
        return node.op
    if isinstance(node, Number):
        return str(int(node.value))
    return node.name


def test_fold_tree_visits_children_left_to_right_before_parent() -> None:
    tree = parse_postfix("ab+c2-*")

    assert fold_tree(tree, lambda node, kids: "".join(kids) + _label(node)) == "ab+c2-*"
    assert fold_tree(tree, lambda node, kids: 1 + sum(kids)) == 7


def test_fold_tree_propagates_visitor_errors() -> None:
    def visit(node, kids):
        if isinstance(node, Variable):
            raise KeyError(node.name)
        return 0

    with pytest.raises(KeyError):
        fold_tree(parse_postfix("1a+"), visit)


def test_rebuild_node_copies_one_node_with_new_children() -> None:
    tree = parse_postfix("ab-")
    children = (Number(1), Number(2))

    copy = rebuild_node(tree, children)

    assert copy is not tree
    assert copy.op == "-"
    assert copy.left is children[0] and copy.right is children[1]
    assert rebuild_node(tree.left, ()).name == "a"


def test_walks_handle_trees_deeper_than_the_recursion_limit() -> None:
    depth = sys.getrecursionlimit() + 500
    tree = parse_postfix("a" + "a-" * (depth - 1), max_depth=None)
    copy = clone(tree)

    assert tree_depth(tree) == depth
    assert count_nodes(copy) == 2 * depth - 1
    assert structurally_equal(copy, tree)
    assert not structurally_equal(copy, parse_postfix("a" + "a-" * (depth - 2), max_depth=None))
