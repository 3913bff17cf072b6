import logging

from ast_nodes import (
    Program, NumberLiteral, StringLiteral, BooleanLiteral, Identifier,
    Assign, Print, ExprStatement,
    BinaryOp, Comparison, LogicalOp, Not,
    ArrayLiteral, IndexAccess, FunctionCall,
    If, While, For,
)
from errors import ParseError
from lexer import Lexer, token_text

logger = logging.getLogger(__name__)


class Parser:
    def __init__(self, lexer):
        self.lexer = lexer
        self.current_token = self.lexer.next_token()
        # one token of lookahead, pulled only when asked for so that errors
        # are reported in source order
        self._next_token = None

    @property
    def next_token(self):
        if self._next_token is None:
            self._next_token = self.lexer.next_token()
        return self._next_token

    # move to next token, but only if it matches what we expect
    def eat(self, token_type):
        if self.current_token.type != token_type:
            tok = self.current_token
            raise ParseError(
                f"Expected '{token_text(token_type)}', got {tok.describe()}", tok.line, tok.column
            )
        tok = self.current_token
        if self._next_token is not None:
            self.current_token = self._next_token
            self._next_token = None
        else:
            self.current_token = self.lexer.next_token()
        return tok

    def error_here(self, message):
        tok = self.current_token
        raise ParseError(f"{message}, got {tok.describe()}", tok.line, tok.column)

    # ---------- TOP LEVEL ----------
    def parse(self):
        statements = []
        try:
            while self.current_token.type != "EOF":
                statements.append(self.statement())
        except RecursionError:
            tok = self.current_token
            raise ParseError("Program nested too deeply", tok.line, tok.column) from None

        logger.debug("parsed program with %d top-level statements", len(statements))
        return Program(statements)

    # ---------- STATEMENTS ----------
    def statement(self):
        tok = self.current_token

        if tok.type == "PRINT":
            return self.print_statement()
        if tok.type == "IF":
            return self.if_statement()
        if tok.type == "ELSEIF":
            self.error_here("elseif used without a preceding if")
        if tok.type == "ELSE":
            self.error_here("else used without a preceding if")
        if tok.type == "WHILE":
            return self.while_statement()
        if tok.type == "FOR":
            return self.for_statement()

        # name = expr ;
        if tok.type == "IDENT" and self.next_token.type == "ASSIGN":
            node = self.assignment()
            self.eat("SEMI")
            return node

        expr = self.expr()
        self.eat("SEMI")
        node = ExprStatement(expr)
        node.line = tok.line
        return node

    def print_statement(self):
        tok = self.eat("PRINT")
        expr = self.expr()
        self.eat("SEMI")
        node = Print(expr)
        node.line = tok.line
        return node

    def assignment(self):
        # name = expr (the caller consumes any terminator)
        if self.current_token.type != "IDENT":
            self.error_here("Expected a variable name")
        name_token = self.eat("IDENT")
        self.eat("ASSIGN")
        value_expr = self.expr()
        node = Assign(name_token.value, value_expr)
        node.line = name_token.line
        return node

    def if_statement(self):
        # Grammar:
        #   IF expr block (ELSEIF expr block)* (ELSE block)?
        # Elseif clauses stay a flat list on the one If node.
        tok = self.eat("IF")
        condition = self.expr()
        then_block = self.block()

        elseif_clauses = []
        while self.current_token.type == "ELSEIF":
            self.eat("ELSEIF")
            elseif_cond = self.expr()
            elseif_clauses.append((elseif_cond, self.block()))

        else_block = None
        if self.current_token.type == "ELSE":
            self.eat("ELSE")
            else_block = self.block()

        node = If(condition, then_block, elseif_clauses, else_block)
        node.line = tok.line
        return node

    def while_statement(self):
        tok = self.eat("WHILE")
        condition = self.expr()
        body = self.block()
        node = While(condition, body)
        node.line = tok.line
        return node

    def for_statement(self):
        # FOR assignment ; expr ; assignment block
        tok = self.eat("FOR")
        init = self.assignment()
        self.eat("SEMI")
        condition = self.expr()
        self.eat("SEMI")
        update = self.assignment()
        body = self.block()
        node = For(init, condition, update, body)
        node.line = tok.line
        return node

    def block(self):
        self.eat("LBRACE")
        statements = []
        while self.current_token.type != "RBRACE":
            if self.current_token.type == "EOF":
                self.error_here("Expected '}' to close block")
            statements.append(self.statement())
        self.eat("RBRACE")
        return statements

    # ---------- EXPRESSIONS ----------
    # expr -> or_expr
    def expr(self):
        return self.or_expr()

    # or_expr -> and_expr (|| and_expr)*
    def or_expr(self):
        node = self.and_expr()
        while self.current_token.type == "OR":
            op_token = self.eat("OR")
            node = self._binary(LogicalOp, node, "||", self.and_expr(), op_token)
        return node

    # and_expr -> equality (&& equality)*
    def and_expr(self):
        node = self.equality()
        while self.current_token.type == "AND":
            op_token = self.eat("AND")
            node = self._binary(LogicalOp, node, "&&", self.equality(), op_token)
        return node

    # equality -> relational ((==|!=) relational)*
    def equality(self):
        node = self.relational()
        while self.current_token.type in ("EQEQ", "NOTEQ"):
            op_token = self.eat(self.current_token.type)
            node = self._binary(Comparison, node, token_text(op_token.type), self.relational(), op_token)
        return node

    # relational -> additive ((<|>|<=|>=) additive)*
    def relational(self):
        node = self.additive()
        while self.current_token.type in ("LT", "GT", "LTE", "GTE"):
            op_token = self.eat(self.current_token.type)
            node = self._binary(Comparison, node, token_text(op_token.type), self.additive(), op_token)
        return node

    # additive -> multiplicative ((+|-) multiplicative)*
    def additive(self):
        node = self.multiplicative()
        while self.current_token.type in ("PLUS", "MINUS"):
            op_token = self.eat(self.current_token.type)
            node = self._binary(BinaryOp, node, token_text(op_token.type), self.multiplicative(), op_token)
        return node

    # multiplicative -> unary ((*|/) unary)*
    def multiplicative(self):
        node = self.unary()
        while self.current_token.type in ("STAR", "SLASH"):
            op_token = self.eat(self.current_token.type)
            node = self._binary(BinaryOp, node, token_text(op_token.type), self.unary(), op_token)
        return node

    # unary -> ! unary | postfix
    def unary(self):
        if self.current_token.type == "NOT":
            tok = self.eat("NOT")
            node = Not(self.unary())
            node.line = tok.line
            return node
        return self.postfix()

    # postfix -> primary ([ expr ])*
    def postfix(self):
        node = self.primary()
        while self.current_token.type == "LBRACKET":
            tok = self.eat("LBRACKET")
            index_expr = self.expr()
            self.eat("RBRACKET")
            node = IndexAccess(node, index_expr)
            node.line = tok.line
        return node

    # primary -> NUMBER | STRING | TRUE | FALSE | IDENT | builtin call | array literal | (expr)
    def primary(self):
        tok = self.current_token

        if tok.type == "NUMBER":
            self.eat("NUMBER")
            node = NumberLiteral(tok.value)
        elif tok.type == "STRING":
            self.eat("STRING")
            node = StringLiteral(tok.value)
        elif tok.type in ("TRUE", "FALSE"):
            self.eat(tok.type)
            node = BooleanLiteral(tok.type == "TRUE")
        elif tok.type == "IDENT" and self.next_token.type == "LPAREN":
            # unknown names still parse as calls; the evaluator rejects them
            return self.function_call()
        elif tok.type == "IDENT":
            self.eat("IDENT")
            node = Identifier(tok.value)
        elif tok.type == "BUILTIN":
            return self.function_call()
        elif tok.type == "LBRACKET":
            return self.array_literal()
        elif tok.type == "LPAREN":
            self.eat("LPAREN")
            node = self.expr()
            self.eat("RPAREN")
            return node
        else:
            self.error_here("Expected an expression")

        node.line = tok.line
        return node

    def function_call(self):
        # BUILTIN or IDENT name followed by an argument list
        name_token = self.eat(self.current_token.type)
        self.eat("LPAREN")
        args = self.expr_list("RPAREN")
        self.eat("RPAREN")
        node = FunctionCall(name_token.value, args)
        node.line = name_token.line
        return node

    def array_literal(self):
        tok = self.eat("LBRACKET")
        elements = self.expr_list("RBRACKET")
        self.eat("RBRACKET")
        node = ArrayLiteral(elements)
        node.line = tok.line
        return node

    # ---------- HELPERS ----------
    def expr_list(self, closing):
        # comma separated, possibly empty; stops before `closing`
        items = []
        if self.current_token.type != closing:
            items.append(self.expr())
            while self.current_token.type == "COMMA":
                self.eat("COMMA")
                items.append(self.expr())
        return items

    def _binary(self, node_class, left, op, right, op_token):
        node = node_class(left, op, right)
        node.line = op_token.line
        return node


def parse_source(source):
    """Lex and parse ``source`` into a Program."""
    return Parser(Lexer(source)).parse()
