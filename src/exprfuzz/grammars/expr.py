from ..grammar import DEFAULT_WEIGHTS, ProductionTable
from ..production import (
    ArrayNode, BinaryNode, BoolNode, BuiltinNode, CallNode, ConditionalNode,
    FloatNode, IdentifierNode, IntegerNode, MapNode, MemberNode, NilNode,
    PairNode, PointerNode, SliceNode, StringNode, UnaryNode,
)
from ..checker.builtins import PREDICATES
from ..checker.environment import FUNCTION_NAMES, METHOD_NAMES

FLOATS = [0.0, 0.5]
INTEGERS = range(3)
STRINGS = ['a', 'b', 'c']
PROPERTIES = ['a', 'b', 'obj']

UNARY_OPERATORS = ['-', '!', 'not']

BINARY_OPERATORS = [
    'or', '||', 'and', '&&',
    '==', '!=', '<', '>', '>=', '<=',
    'in', 'matches', 'contains', 'startsWith', 'endsWith',
    '..',
    '+', '-', '*', '/', '%', '**', '^',
]


# leaves

def nil_node(b, depth):
    return NilNode()


def float_node(b, depth):
    return FloatNode(b.choice(FLOATS))


def integer_node(b, depth):
    return IntegerNode(b.choice(INTEGERS))


def string_node(b, depth):
    return StringNode(b.choice(STRINGS))


def boolean_node(b, depth):
    return BoolNode(b.maybe())


def identifier_node(b, depth):
    return IdentifierNode(b.choice(b.names))


def pointer_node(b, depth):
    return PointerNode()


# recursive constructs, children are always built at depth - 1

def member_node(b, depth):
    node = b.build(depth - 1)
    if b.weighted('property') == 'literal':
        prop = StringNode(b.choice(PROPERTIES))
    else:
        prop = b.build(depth - 1)
    return MemberNode(node, prop, optional=b.maybe())


def unary_node(b, depth):
    return UnaryNode(b.choice(UNARY_OPERATORS), b.build(depth - 1))


def binary_node(b, depth):
    return BinaryNode(b.choice(BINARY_OPERATORS), b.build(depth - 1), b.build(depth - 1))


def method_callee(b, depth):
    return MemberNode(b.build(depth - 1), StringNode(b.choice(METHOD_NAMES)), optional=b.maybe())


def func_callee(b, depth):
    return IdentifierNode(b.choice(FUNCTION_NAMES))


CALLEES = {'method': method_callee, 'func': func_callee}


def call_node(b, depth):
    callee = CALLEES[b.weighted('callee')](b, depth)
    return CallNode(callee, b.children(b.arity(), depth))


def builtin_node(b, depth):
    return BuiltinNode(b.choice(b.builtins), b.children(b.arity(), depth))


def predicate_node(b, depth):
    return BuiltinNode(b.choice(PREDICATES), b.children(2, depth))


def array_node(b, depth):
    return ArrayNode(b.children(b.arity(), depth))


def map_node(b, depth):
    pairs = [PairNode(string_node(b, depth - 1), b.build(depth - 1))
             for _ in range(b.arity())]
    return MapNode(pairs)


def slice_node(b, depth):
    return SliceNode(b.build(depth - 1), b.build(depth - 1), b.build(depth - 1))


def conditional_node(b, depth):
    return ConditionalNode(b.build(depth - 1), b.build(depth - 1), b.build(depth - 1))


LEAF = [
    ('nil', nil_node),
    ('float', float_node),
    ('integer', integer_node),
    ('string', string_node),
    ('boolean', boolean_node),
    ('identifier', identifier_node),
]

RECURSIVE = [
    ('array', array_node),
    ('map', map_node),
    ('identifier', identifier_node),
    ('member', member_node),
    ('unary', unary_node),
    ('binary', binary_node),
    ('call', call_node),
    ('builtin', builtin_node),
    ('predicate', predicate_node),
    ('pointer', pointer_node),
    ('slice', slice_node),
    ('conditional', conditional_node),
]


def expr_grammar(weights=None):
    """(leaf, recursive) production tables for the expression language."""
    weights = weights or DEFAULT_WEIGHTS
    leaf, recursive = ProductionTable('leaf'), ProductionTable('recursive')
    for name, generate in LEAF:
        leaf(name, generate, weight=weights.leaf[name])
    for name, generate in RECURSIVE:
        recursive(name, generate, weight=weights.recursive[name])
    return leaf, recursive
