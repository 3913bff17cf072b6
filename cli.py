import logging
import os
import sys
import traceback

from colorama import Fore, Style, just_fix_windows_console

from errors import QuillError
from evaluator import Evaluator
from lexer import Lexer
from parser import Parser

logger = logging.getLogger("quill")

USAGE = """Usage:
  quill <script.ql>
  quill --ast <script.ql>     print the syntax tree instead of running
  (optional) --debug to log pipeline stages and show Python tracebacks"""


# Simple AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_dict(s) for s in node]

    t = node.__class__.__name__
    d = {"type": t}

    if t == "Program":
        d["statements"] = ast_to_dict(node.statements)
    elif t in ("NumberLiteral", "StringLiteral", "BooleanLiteral"):
        d["value"] = node.value
    elif t == "Identifier":
        d["name"] = node.name
    elif t == "Assign":
        d["name"] = node.name
        d["expr"] = ast_to_dict(node.expr)
    elif t in ("Print", "ExprStatement", "Not"):
        d["expr"] = ast_to_dict(node.expr)
    elif t in ("BinaryOp", "Comparison", "LogicalOp"):
        d["op"] = node.op
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif t == "ArrayLiteral":
        d["elements"] = ast_to_dict(node.elements)
    elif t == "IndexAccess":
        d["target"] = ast_to_dict(node.target)
        d["index"] = ast_to_dict(node.index)
    elif t == "FunctionCall":
        d["name"] = node.name
        d["args"] = ast_to_dict(node.args)
    elif t == "If":
        d["condition"] = ast_to_dict(node.condition)
        d["then_block"] = ast_to_dict(node.then_block)
        d["elseif"] = [
            {"condition": ast_to_dict(cond), "block": ast_to_dict(block)}
            for cond, block in node.elseif_clauses
        ]
        d["else_block"] = ast_to_dict(node.else_block)
    elif t == "While":
        d["condition"] = ast_to_dict(node.condition)
        d["body"] = ast_to_dict(node.body)
    elif t == "For":
        d["init"] = ast_to_dict(node.init)
        d["condition"] = ast_to_dict(node.condition)
        d["update"] = ast_to_dict(node.update)
        d["body"] = ast_to_dict(node.body)
    else:
        d["raw"] = str(node)

    return d


def tree_lines(obj, indent=0):
    # YAML-ish: list items start with "- " and carry their first field inline
    pad = "  " * indent
    if isinstance(obj, list):
        for item in obj:
            nested = list(tree_lines(item, indent + 1)) or [str(item)]
            yield f"{pad}- {nested[0].lstrip()}"
            yield from nested[1:]
    elif isinstance(obj, dict):
        for key, value in obj.items():
            if isinstance(value, (dict, list)) and value:
                yield f"{pad}{key}:"
                yield from tree_lines(value, indent + 1)
            else:
                yield f"{pad}{key}: {value}"
    else:
        yield f"{pad}{obj}"


def pretty(obj):
    return "\n".join(tree_lines(obj))


def report_error(message):
    if sys.stdout.isatty():
        print(f"{Fore.RED}{message}{Style.RESET_ALL}")
    else:
        print(message)
    sys.stdout.flush()


def read_script(path):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        report_error(f"Error: cannot read {path}: {e.strerror or e}")
        sys.exit(1)
    except UnicodeDecodeError:
        report_error(f"Error: cannot read {path}: not valid UTF-8")
        sys.exit(1)


def cmd_parse(path, debug: bool = False):
    code = read_script(path)
    try:
        program = Parser(Lexer(code)).parse()
    except QuillError as e:
        if debug:
            traceback.print_exc()
        report_error(str(e))
        sys.exit(1)

    print(pretty(ast_to_dict(program)))


def cmd_run(path, debug: bool = False):
    code = read_script(path)

    # lex/parse errors stop us before anything runs
    try:
        program = Parser(Lexer(code)).parse()
    except QuillError as e:
        if debug:
            traceback.print_exc()
        report_error(str(e))
        sys.exit(1)

    base_dir = os.path.dirname(os.path.abspath(path))
    evaluator = Evaluator(base_dir=base_dir)
    try:
        evaluator.evaluate(program)
    except QuillError as e:
        sys.stdout.flush()
        if debug:
            traceback.print_exc()
        report_error(str(e))
        sys.exit(1)
    finally:
        logger.debug("environment at exit: %r", evaluator.env)


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)

    debug = False
    if "--debug" in args:
        debug = True
        args.remove("--debug")

    dump_ast = False
    if "--ast" in args:
        dump_ast = True
        args.remove("--ast")

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    just_fix_windows_console()

    if len(args) != 1 or args[0].startswith("--"):
        print(USAGE)
        sys.exit(1)

    path = args[0]
    logger.debug("script %s", path)
    if dump_ast:
        cmd_parse(path, debug=debug)
    else:
        cmd_run(path, debug=debug)


if __name__ == "__main__":
    main()
