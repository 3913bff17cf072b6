class ASTNode:
    # Optional source line (1-based). Parser sets this.
    line: int | None = None


class Program(ASTNode):
    def __init__(self, statements):
        self.statements = statements


class NumberLiteral(ASTNode):
    def __init__(self, value):
        self.value = value


class StringLiteral(ASTNode):
    def __init__(self, value):
        self.value = value


class BooleanLiteral(ASTNode):
    def __init__(self, value):
        self.value = value


class Identifier(ASTNode):
    def __init__(self, name):
        self.name = name


class Assign(ASTNode):
    def __init__(self, name, expr):
        self.name = name
        self.expr = expr


class Print(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class ExprStatement(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class BinaryOp(ASTNode):
    # arithmetic: + - * /
    def __init__(self, left, op, right):
        self.left = left
        self.op = op
        self.right = right


class Comparison(ASTNode):
    # == != < > <= >=
    def __init__(self, left, op, right):
        self.left = left
        self.op = op
        self.right = right


class LogicalOp(ASTNode):
    # && ||
    def __init__(self, left, op, right):
        self.left = left
        self.op = op
        self.right = right


class Not(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class ArrayLiteral(ASTNode):
    def __init__(self, elements):
        self.elements = elements  # list[expr]


class IndexAccess(ASTNode):
    def __init__(self, target, index):
        self.target = target
        self.index = index


class FunctionCall(ASTNode):
    def __init__(self, name, args):
        self.name = name
        self.args = args  # list[expr]


class If(ASTNode):
    def __init__(self, condition, then_block, elseif_clauses=None, else_block=None):
        self.condition = condition
        self.then_block = then_block          # list[stmt]
        self.elseif_clauses = elseif_clauses or []  # list[(expr, list[stmt])]
        self.else_block = else_block          # list[stmt] | None


class While(ASTNode):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body


class For(ASTNode):
    def __init__(self, init, condition, update, body):
        self.init = init            # Assign
        self.condition = condition
        self.update = update        # Assign
        self.body = body
