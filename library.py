"""Built-in functions callable from Quill scripts.

Every built-in takes the calling evaluator and the already-evaluated argument
values, checks the argument count and then each argument's type, and returns
a new value. Arrays are tuples, so push/pop never touch the array they were
given.
"""
import logging
import os

from errors import EvalError
from values import is_array, is_text, render, type_name, values_equal

logger = logging.getLogger(__name__)


# ---------- ARGUMENT CHECKS ----------
def check_arity(name, args, expected):
    if len(args) != expected:
        plural = "argument" if expected == 1 else "arguments"
        raise EvalError(f"{name}() expects {expected} {plural}, got {len(args)}")


def expect_text(name, args, i):
    value = args[i]
    if not is_text(value):
        raise EvalError(f"{name}() argument {i + 1} must be text, got {type_name(value)}")
    return value


def expect_array(name, args, i):
    value = args[i]
    if not is_array(value):
        raise EvalError(f"{name}() argument {i + 1} must be an array, got {type_name(value)}")
    return value


def expect_separator(name, args, i):
    value = expect_text(name, args, i)
    if value == "":
        raise EvalError(f"{name}() argument {i + 1} must not be empty")
    return value


def expect_non_empty_array(name, args, i):
    value = expect_array(name, args, i)
    if not value:
        raise EvalError(f"{name}() called on an empty array")
    return value


# ---------- TEXT ----------
def builtin_join(evaluator, args):
    check_arity("join", args, 2)
    sep = expect_text("join", args, 0)
    items = expect_array("join", args, 1)
    return sep.join(render(item) for item in items)


def builtin_split(evaluator, args):
    check_arity("split", args, 2)
    text = expect_text("split", args, 0)
    sep = expect_separator("split", args, 1)
    return tuple(text.split(sep))


def builtin_count(evaluator, args):
    check_arity("count", args, 2)
    haystack = args[0]
    if is_text(haystack):
        needle = expect_separator("count", args, 1)
        return haystack.count(needle)
    if is_array(haystack):
        needle = args[1]
        return sum(1 for item in haystack if values_equal(item, needle))
    raise EvalError(f"count() argument 1 must be text or an array, got {type_name(haystack)}")


def builtin_length(evaluator, args):
    check_arity("length", args, 1)
    value = args[0]
    if not (is_text(value) or is_array(value)):
        raise EvalError(f"length() argument 1 must be text or an array, got {type_name(value)}")
    return len(value)


def builtin_uppercase(evaluator, args):
    check_arity("uppercase", args, 1)
    return expect_text("uppercase", args, 0).upper()


def builtin_lowercase(evaluator, args):
    check_arity("lowercase", args, 1)
    return expect_text("lowercase", args, 0).lower()


def builtin_trim(evaluator, args):
    check_arity("trim", args, 1)
    return expect_text("trim", args, 0).strip()


def builtin_replace(evaluator, args):
    check_arity("replace", args, 3)
    text = expect_text("replace", args, 0)
    old = expect_separator("replace", args, 1)
    new = expect_text("replace", args, 2)
    return text.replace(old, new)


# ---------- ARRAYS ----------
def builtin_push(evaluator, args):
    check_arity("push", args, 2)
    items = expect_array("push", args, 0)
    return items + (args[1],)


def builtin_pop(evaluator, args):
    check_arity("pop", args, 1)
    items = expect_non_empty_array("pop", args, 0)
    return items[:-1]


def builtin_first(evaluator, args):
    check_arity("first", args, 1)
    return expect_non_empty_array("first", args, 0)[0]


def builtin_last(evaluator, args):
    check_arity("last", args, 1)
    return expect_non_empty_array("last", args, 0)[-1]


# ---------- FILES ----------
def resolve_path(evaluator, path):
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(evaluator.base_dir, path))


def builtin_read_file(evaluator, args):
    check_arity("read_file", args, 1)
    path = resolve_path(evaluator, expect_text("read_file", args, 0))
    logger.debug("read_file %s", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as e:
        raise EvalError(f"read_file() cannot read {path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise EvalError(f"read_file() cannot read {path}: not valid UTF-8") from e


def builtin_write_file(evaluator, args):
    check_arity("write_file", args, 2)
    path = resolve_path(evaluator, expect_text("write_file", args, 0))
    text = expect_text("write_file", args, 1)
    logger.debug("write_file %s (%d chars)", path, len(text))
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as e:
        raise EvalError(f"write_file() cannot write {path}: {e.strerror or e}") from e
    return True


BUILTINS = {
    "join": builtin_join,
    "split": builtin_split,
    "count": builtin_count,
    "length": builtin_length,
    "uppercase": builtin_uppercase,
    "lowercase": builtin_lowercase,
    "trim": builtin_trim,
    "replace": builtin_replace,
    "push": builtin_push,
    "pop": builtin_pop,
    "first": builtin_first,
    "last": builtin_last,
    "read_file": builtin_read_file,
    "write_file": builtin_write_file,
}


def call_builtin(evaluator, name, args):
    func = BUILTINS.get(name)
    if func is None:
        raise EvalError(f"Unknown function: {name}")
    logger.debug("call %s() with %d args", name, len(args))
    return func(evaluator, args)
