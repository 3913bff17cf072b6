"""Runtime values.

Quill values are plain Python objects:

    Number   -> int (signed 64-bit range)
    Text     -> str
    Boolean  -> bool
    Array    -> tuple of values

``bool`` is a subclass of ``int`` in Python, so every check here tests for
``bool`` first.
"""

I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1


def is_number(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_text(value) -> bool:
    return isinstance(value, str)


def is_bool(value) -> bool:
    return isinstance(value, bool)


def is_array(value) -> bool:
    return isinstance(value, tuple)


def in_i64_range(value: int) -> bool:
    return I64_MIN <= value <= I64_MAX


def type_name(value) -> str:
    if is_bool(value):
        return "boolean"
    if is_number(value):
        return "number"
    if is_text(value):
        return "text"
    if is_array(value):
        return "array"
    if value is None:
        return "nothing"
    raise TypeError(f"not a Quill value: {value!r}")


def render(value) -> str:
    if is_bool(value):
        return "true" if value else "false"
    if is_number(value):
        return str(value)
    if is_text(value):
        return value
    if is_array(value):
        return "[" + ", ".join(render(v) for v in value) + "]"
    raise TypeError(f"not a Quill value: {value!r}")


def values_equal(a, b) -> bool:
    # no cross-type equality: 1 != true
    if type_name(a) != type_name(b):
        return False
    if is_array(a):
        return len(a) == len(b) and all(values_equal(x, y) for x, y in zip(a, b))
    return a == b
