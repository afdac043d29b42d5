"""Evaluator half of the reference checker: walks a compiled production tree."""
import math
import re

from ..errors import EvalError
from ..production import (
    ArrayNode, BinaryNode, BoolNode, BuiltinNode, CallNode, ConditionalNode,
    FloatNode, IdentifierNode, IntegerNode, MapNode, MemberNode, NilNode,
    PointerNode, SliceNode, StringNode, UnaryNode,
)
from . import builtins
from .builtins import is_number, type_name
from .environment import ENV, is_int

# failures of a well-formed expression on concrete values
RUNTIME_ERRORS = (TypeError, ValueError, KeyError, IndexError,
                  ZeroDivisionError, OverflowError, re.error, RecursionError)

MAX_RANGE = 10_000
# work units allowed per evaluation: one per node visit plus the size of
# every list, string or map an operation produces
MAX_STEPS = 200_000


def _bool(x, op):
    if not isinstance(x, bool):
        raise TypeError(f'invalid operation: {op} {type_name(x)}')
    return x


def _equal(a, b):
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    if is_number(a) and is_number(b):
        return a == b
    if type(a) is not type(b):
        return False
    return a == b


def _compare(op, a, b):
    if not ((is_number(a) and is_number(b)) or (isinstance(a, str) and isinstance(b, str))):
        raise TypeError(f'invalid operation: {type_name(a)} {op} {type_name(b)}')
    return {'<': a < b, '>': a > b, '<=': a <= b, '>=': a >= b}[op]


def _numbers(op, a, b):
    if not (is_number(a) and is_number(b)):
        raise TypeError(f'invalid operation: {type_name(a)} {op} {type_name(b)}')


def _strings(op, a, b):
    if not (isinstance(a, str) and isinstance(b, str)):
        raise TypeError(f'invalid operation: {type_name(a)} {op} {type_name(b)}')


def _in(a, b):
    if isinstance(b, list):
        return any(_equal(a, x) for x in b)
    if isinstance(b, dict):
        if not isinstance(a, str):
            raise TypeError(f'invalid operation: {type_name(a)} in map')
        return a in b
    raise TypeError(f'invalid operation: in {type_name(b)}')


def _arithmetic(op, a, b):
    if op == '+':
        if isinstance(a, str) and isinstance(b, str):
            return a + b
        if isinstance(a, list) and isinstance(b, list):
            return a + b
        _numbers(op, a, b)
        return a + b
    if op == '..':
        if not (is_int(a) and is_int(b)):
            raise TypeError(f'invalid operation: {type_name(a)} .. {type_name(b)}')
        if b - a > MAX_RANGE:
            raise ValueError('range too large')
        return list(range(a, b + 1))
    _numbers(op, a, b)
    if op == '-':
        return a - b
    if op == '*':
        return a * b
    if op == '/':
        return a / b
    if op == '%':
        if not (is_int(a) and is_int(b)):
            raise TypeError(f'invalid operation: {type_name(a)} % {type_name(b)}')
        return a % b
    # ** and ^
    return math.pow(a, b)


class Frame:
    """Evaluation state: the environment and the stack of predicate elements."""

    def __init__(self, env, budget=MAX_STEPS):
        self.env = env
        self.pointers = []
        self.budget = budget

    def step(self, cost=1):
        self.budget -= cost
        if self.budget < 0:
            raise ValueError("evaluation step limit exceeded")

    def charge(self, value):
        if isinstance(value, (list, str, dict)):
            self.step(len(value))
        return value


def evaluate(node, frame):
    frame.step()
    if isinstance(node, NilNode):
        return None
    if isinstance(node, (IntegerNode, FloatNode, StringNode, BoolNode)):
        return node.value
    if isinstance(node, IdentifierNode):
        return frame.env[node.value]
    if isinstance(node, PointerNode):
        if not frame.pointers:
            raise ValueError('pointer outside closure')
        return frame.pointers[-1]
    if isinstance(node, UnaryNode):
        value = evaluate(node.node, frame)
        if node.operator == '-':
            if not is_number(value):
                raise TypeError(f'invalid operation: - {type_name(value)}')
            return -value
        return not _bool(value, node.operator)
    if isinstance(node, BinaryNode):
        return frame.charge(binary(node, frame))
    if isinstance(node, MemberNode):
        return member(node, frame)
    if isinstance(node, SliceNode):
        return frame.charge(slice_(node, frame))
    if isinstance(node, ConditionalNode):
        cond = _bool(evaluate(node.cond, frame), '?')
        return evaluate(node.exp1 if cond else node.exp2, frame)
    if isinstance(node, ArrayNode):
        return [evaluate(n, frame) for n in node.nodes]
    if isinstance(node, MapNode):
        return {evaluate(p.key, frame): evaluate(p.value, frame) for p in node.pairs}
    if isinstance(node, CallNode):
        callee = evaluate(node.callee, frame)
        if not callable(callee):
            raise TypeError(f'{type_name(callee)} is not callable')
        return frame.charge(callee(*[evaluate(a, frame) for a in node.arguments]))
    if isinstance(node, BuiltinNode):
        if node.name in builtins.PREDICATES:
            return frame.charge(predicate(node, frame))
        impl = builtins.BUILTINS[node.name].impl
        return frame.charge(impl(*[evaluate(a, frame) for a in node.arguments]))
    raise TypeError(f'cannot evaluate {node!r}')


def binary(node, frame):
    op = node.operator
    if op in ('or', '||'):
        return _bool(evaluate(node.left, frame), op) or _bool(evaluate(node.right, frame), op)
    if op in ('and', '&&'):
        return _bool(evaluate(node.left, frame), op) and _bool(evaluate(node.right, frame), op)
    a, b = evaluate(node.left, frame), evaluate(node.right, frame)
    if op == '==':
        return _equal(a, b)
    if op == '!=':
        return not _equal(a, b)
    if op in ('<', '>', '<=', '>='):
        return _compare(op, a, b)
    if op == 'in':
        return _in(a, b)
    if op == 'matches':
        _strings(op, a, b)
        return re.search(b, a) is not None
    if op == 'contains':
        _strings(op, a, b)
        return b in a
    if op == 'startsWith':
        _strings(op, a, b)
        return a.startswith(b)
    if op == 'endsWith':
        _strings(op, a, b)
        return a.endswith(b)
    return _arithmetic(op, a, b)


def member(node, frame):
    base = evaluate(node.node, frame)
    if base is None and node.optional:
        return None
    key = evaluate(node.property, frame)
    if isinstance(base, dict):
        if not isinstance(key, str):
            raise TypeError(f'cannot use {type_name(key)} as map key')
        if key not in base:
            if node.optional:
                return None
            raise KeyError(key)
        return base[key]
    if isinstance(base, (list, str)):
        if not is_int(key):
            raise TypeError(f'array elements can only be selected using an integer (got {type_name(key)})')
        if not -len(base) <= key < len(base):
            if node.optional:
                return None
            raise IndexError(f'index out of range: {key} (array length is {len(base)})')
        return base[key]
    raise TypeError(f'type {type_name(base)} has no field {key!r}')


def slice_(node, frame):
    base = evaluate(node.node, frame)
    if not isinstance(base, (list, str)):
        raise TypeError(f'cannot slice {type_name(base)}')
    lo = evaluate(node.from_, frame) if node.from_ is not None else 0
    hi = evaluate(node.to, frame) if node.to is not None else len(base)
    if not (is_int(lo) and is_int(hi)):
        raise TypeError('slice bounds must be integers')
    return base[lo:hi]


def predicate(node, frame):
    collection = evaluate(node.arguments[0], frame)
    if not isinstance(collection, list):
        raise TypeError(f'builtin {node.name} takes only array (got {type_name(collection)})')
    body = node.arguments[1]
    results = []
    for item in collection:
        frame.pointers.append(item)
        try:
            results.append((item, evaluate(body, frame)))
        finally:
            frame.pointers.pop()
    if node.name == 'map':
        return [r for _, r in results]
    flags = [_bool(r, node.name) for _, r in results]
    if node.name == 'filter':
        return [item for (item, _), flag in zip(results, flags) if flag]
    if node.name == 'count':
        return sum(flags)
    if node.name == 'all':
        return all(flags)
    if node.name == 'none':
        return not any(flags)
    if node.name == 'any':
        return any(flags)
    return flags.count(True) == 1  # one


def run(program, env=None):
    """Evaluate a compiled program; any failure on concrete values is an EvalError."""
    frame = Frame(env if env is not None else program.env or ENV)
    try:
        return evaluate(program.node, frame)
    except RUNTIME_ERRORS as e:
        raise EvalError(f'{type(e).__name__}: {e}') from e
