import logging
import os
import sys

from ast_nodes import (
    Program, NumberLiteral, StringLiteral, BooleanLiteral, Identifier,
    Assign, Print, ExprStatement,
    BinaryOp, Comparison, LogicalOp, Not,
    ArrayLiteral, IndexAccess, FunctionCall,
    If, While, For,
)
from errors import EvalError
from library import call_builtin
from parser import parse_source
from values import in_i64_range, is_array, is_bool, is_number, is_text, render, type_name

logger = logging.getLogger(__name__)


class Environment:
    """The single global name -> value mapping for one program run."""

    def __init__(self, values=None):
        self.values = dict(values or {})

    def get(self, name):
        if name not in self.values:
            raise EvalError(f"Undefined variable: {name}")
        return self.values[name]

    def set(self, name, value):
        self.values[name] = value

    def __contains__(self, name):
        return name in self.values

    def __getitem__(self, name):
        return self.values[name]

    def __repr__(self):
        return f"Environment({self.values!r})"


class Evaluator:
    def __init__(self, env: Environment | None = None, out=None, base_dir: str | None = None):
        self.env = env if env is not None else Environment()
        self.out = out if out is not None else sys.stdout
        self.base_dir = base_dir or os.getcwd()

    def evaluate(self, node):
        try:
            return self._dispatch(node)
        except EvalError as e:
            # innermost node with a known line wins
            if e.line is None and node.line is not None:
                e.line = node.line
            raise
        except RecursionError:
            raise EvalError("Program nested too deeply", node.line) from None

    def _dispatch(self, node):
        if isinstance(node, Program):
            logger.debug("running program with %d statements", len(node.statements))
            return self.eval_block(node.statements)
        if isinstance(node, (NumberLiteral, StringLiteral, BooleanLiteral)):
            return node.value
        if isinstance(node, Identifier):
            return self.env.get(node.name)
        if isinstance(node, Assign):
            value = self.evaluate(node.expr)
            self.env.set(node.name, value)
            return value
        if isinstance(node, Print):
            value = self.evaluate(node.expr)
            self.out.write(render(value) + "\n")
            return None
        if isinstance(node, ExprStatement):
            return self.evaluate(node.expr)
        if isinstance(node, BinaryOp):
            return self.eval_binary(node)
        if isinstance(node, Comparison):
            return self.eval_comparison(node)
        if isinstance(node, LogicalOp):
            return self.eval_logical(node)
        if isinstance(node, Not):
            return not self.require_bool(self.evaluate(node.expr), "operand of '!'")
        if isinstance(node, ArrayLiteral):
            return tuple(self.evaluate(element) for element in node.elements)
        if isinstance(node, IndexAccess):
            return self.eval_index(node)
        if isinstance(node, FunctionCall):
            args = [self.evaluate(arg) for arg in node.args]
            return call_builtin(self, node.name, args)
        if isinstance(node, If):
            return self.eval_if(node)
        if isinstance(node, While):
            return self.eval_while(node)
        if isinstance(node, For):
            return self.eval_for(node)

        raise EvalError(f"Unknown node: {node.__class__.__name__}")

    # ---------- HELPERS ----------
    def require_bool(self, value, context):
        if not is_bool(value):
            raise EvalError(f"{context} must be boolean, got {type_name(value)}")
        return value

    def eval_block(self, statements):
        result = None
        for stmt in statements:
            result = self.evaluate(stmt)
        return result

    # ---------- OPERATORS ----------
    def eval_binary(self, node):
        a = self.evaluate(node.left)
        b = self.evaluate(node.right)
        if not (is_number(a) and is_number(b)):
            raise EvalError(
                f"Operator '{node.op}' expects numbers, got {type_name(a)} and {type_name(b)}"
            )

        if node.op == "+":
            result = a + b
        elif node.op == "-":
            result = a - b
        elif node.op == "*":
            result = a * b
        elif node.op == "/":
            if b == 0:
                raise EvalError("Division by zero")
            # truncate toward zero, not floor
            result = abs(a) // abs(b)
            if (a < 0) != (b < 0):
                result = -result
        else:
            raise EvalError(f"Unknown operator: {node.op}")

        if not in_i64_range(result):
            raise EvalError(f"Integer overflow in '{node.op}'")
        return result

    def eval_comparison(self, node):
        a = self.evaluate(node.left)
        b = self.evaluate(node.right)
        op = node.op

        if is_number(a) and is_number(b):
            if op == "==":
                return a == b
            if op == "!=":
                return a != b
            if op == "<":
                return a < b
            if op == ">":
                return a > b
            if op == "<=":
                return a <= b
            if op == ">=":
                return a >= b
            raise EvalError(f"Unknown comparison operator: {op}")

        same_kind = (is_text(a) and is_text(b)) or (is_bool(a) and is_bool(b))
        if same_kind and op in ("==", "!="):
            return (a == b) if op == "==" else (a != b)

        raise EvalError(f"Cannot compare {type_name(a)} and {type_name(b)} with '{op}'")

    def eval_logical(self, node):
        left = self.require_bool(self.evaluate(node.left), f"left operand of '{node.op}'")
        if node.op == "||" and left:
            return True
        if node.op == "&&" and not left:
            return False
        return self.require_bool(self.evaluate(node.right), f"right operand of '{node.op}'")

    def eval_index(self, node):
        target = self.evaluate(node.target)
        index = self.evaluate(node.index)
        if not is_array(target):
            raise EvalError(f"Cannot index into {type_name(target)}")
        if not is_number(index):
            raise EvalError(f"Array index must be a number, got {type_name(index)}")
        if index < 0 or index >= len(target):
            raise EvalError(f"Array index out of bounds: {index} (length {len(target)})")
        return target[index]

    # ---------- CONTROL FLOW ----------
    def eval_if(self, node):
        if self.require_bool(self.evaluate(node.condition), "if condition"):
            return self.eval_block(node.then_block)
        for condition, block in node.elseif_clauses:
            if self.require_bool(self.evaluate(condition), "elseif condition"):
                return self.eval_block(block)
        if node.else_block is not None:
            return self.eval_block(node.else_block)
        return None

    def eval_while(self, node):
        result = None
        while self.require_bool(self.evaluate(node.condition), "while condition"):
            result = self.eval_block(node.body)
        return result

    def eval_for(self, node):
        result = None
        self.evaluate(node.init)
        while self.require_bool(self.evaluate(node.condition), "for condition"):
            result = self.eval_block(node.body)
            self.evaluate(node.update)
        return result


def run_source(source, out=None, base_dir=None, env=None):
    """Lex, parse and evaluate a whole program; returns the Evaluator."""
    program = parse_source(source)
    evaluator = Evaluator(env=env, out=out, base_dir=base_dir)
    evaluator.evaluate(program)
    return evaluator
