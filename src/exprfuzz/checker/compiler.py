"""
Compiler half of the reference checker: canonical text -> production tree.

The parser is a precedence climber over the operator table the renderer
uses, so any rendered tree parses back to a tree with the same rendering.
A resolve pass then rejects what a type-aware compiler would reject up front.
"""
import json
import re
from dataclasses import dataclass
from typing import Any

from ..errors import CompileError
from ..production import (
    ArrayNode, BinaryNode, BoolNode, BuiltinNode, CallNode, ConditionalNode,
    FloatNode, IdentifierNode, IntegerNode, MapNode, MemberNode, NilNode,
    Node, PairNode, PointerNode, SliceNode, StringNode, UnaryNode,
    BINARY_PRECEDENCE, UNARY_PRECEDENCE,
)
from . import builtins
from .environment import ENV

TOKEN = re.compile(r'''
    (?P<space>\s+)
  | (?P<float>\d+\.\d+(?:[eE][+-]?\d+)?)
  | (?P<int>\d+)
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<name>[A-Za-z_$][A-Za-z0-9_$]*)
  | (?P<op>\?\.|\.\.|\*\*|==|!=|<=|>=|&&|\|\||[-+*/%^<>!?:.,()\[\]{}\#])
''', re.VERBOSE)

WORD_OPERATORS = {'not', 'and', 'or', 'in', 'matches', 'contains', 'startsWith', 'endsWith'}


@dataclass
class Token:
    kind: str
    value: str
    pos: int


@dataclass
class Program:
    source: str
    node: Node
    env: Any = None


def tokenize(source):
    tokens, pos = [], 0
    while pos < len(source):
        m = TOKEN.match(source, pos)
        if not m:
            raise CompileError(f'unexpected character {source[pos]!r} at {pos}')
        kind = m.lastgroup
        if kind != 'space':
            value = m.group()
            if kind == 'name' and value in WORD_OPERATORS:
                kind = 'op'
            tokens.append(Token(kind, value, pos))
        pos = m.end()
    tokens.append(Token('eof', '', pos))
    return tokens


class Parser:
    def __init__(self, source, env=ENV):
        self.source = source
        self.env = env
        self.tokens = tokenize(source)
        self.i = 0

    @property
    def current(self):
        return self.tokens[self.i]

    def advance(self):
        token = self.tokens[self.i]
        self.i += 1
        return token

    def accept(self, value):
        if self.current.kind in ('op', 'name') and self.current.value == value:
            return self.advance()
        return None

    def expect(self, value):
        token = self.accept(value)
        if token is None:
            raise CompileError(f'expected {value!r} at {self.current.pos}, got {self.current.value!r}')
        return token

    def parse(self):
        if self.current.kind == 'eof':
            raise CompileError('empty expression')
        node = self.expression()
        if self.current.kind != 'eof':
            raise CompileError(f'unexpected {self.current.value!r} at {self.current.pos}')
        return node

    def expression(self):
        node = self.binary(0)
        if self.accept('?'):
            exp1 = self.expression()
            self.expect(':')
            exp2 = self.expression()
            node = ConditionalNode(node, exp1, exp2)
        return node

    def binary(self, min_precedence):
        left = self.unary()
        while self.current.kind == 'op' and self.current.value in BINARY_PRECEDENCE:
            operator = self.current.value
            precedence, right_assoc = BINARY_PRECEDENCE[operator]
            if precedence <= min_precedence:
                break
            self.advance()
            right = self.binary(precedence - 1 if right_assoc else precedence)
            left = BinaryNode(operator, left, right)
        return left

    def unary(self):
        token = self.current
        if token.kind == 'op' and token.value in UNARY_PRECEDENCE:
            self.advance()
            return UnaryNode(token.value, self.binary(UNARY_PRECEDENCE[token.value]))
        return self.postfix(self.primary())

    def primary(self):
        token = self.advance()
        if token.kind == 'int':
            return IntegerNode(int(token.value))
        if token.kind == 'float':
            return FloatNode(float(token.value))
        if token.kind == 'string':
            return StringNode(json.loads(token.value))
        if token.kind == 'name':
            if token.value == 'nil':
                return NilNode()
            if token.value in ('true', 'false'):
                return BoolNode(token.value == 'true')
            if self.current.value == '(' and token.value in builtins.BUILTINS \
                    and token.value not in self.env:
                self.advance()
                return BuiltinNode(token.value, self.arguments(')'))
            return IdentifierNode(token.value)
        if token.kind == 'op':
            if token.value == '#':
                return PointerNode()
            if token.value == '(':
                node = self.expression()
                self.expect(')')
                return node
            if token.value == '[':
                return ArrayNode(self.arguments(']'))
            if token.value == '{':
                return MapNode(self.pairs())
        raise CompileError(f'unexpected {token.value or "end of input"!r} at {token.pos}')

    def arguments(self, closing):
        items = []
        if not self.accept(closing):
            items.append(self.expression())
            while self.accept(','):
                items.append(self.expression())
            self.expect(closing)
        return items

    def pairs(self):
        pairs = []
        if self.accept('}'):
            return pairs
        while True:
            token = self.advance()
            if token.kind == 'string':
                key = StringNode(json.loads(token.value))
            elif token.kind == 'name':
                key = StringNode(token.value)
            else:
                raise CompileError(f'invalid map key {token.value!r} at {token.pos}')
            self.expect(':')
            pairs.append(PairNode(key, self.expression()))
            if not self.accept(','):
                break
        self.expect('}')
        return pairs

    def postfix(self, node):
        while True:
            if self.accept('('):
                node = CallNode(node, self.arguments(')'))
            elif self.accept('.'):
                node = MemberNode(node, self.property_name())
            elif self.accept('?.'):
                if self.accept('['):
                    node = MemberNode(node, self.expression(), optional=True)
                    self.expect(']')
                else:
                    node = MemberNode(node, self.property_name(), optional=True)
            elif self.accept('['):
                node = self.index(node)
            else:
                return node

    def property_name(self):
        token = self.advance()
        if token.kind != 'name':
            raise CompileError(f'expected property name at {token.pos}')
        return StringNode(token.value)

    def index(self, node):
        if self.accept(':'):
            to = None if self.current.value == ']' else self.expression()
            self.expect(']')
            return SliceNode(node, None, to)
        first = self.expression()
        if self.accept(':'):
            to = None if self.current.value == ']' else self.expression()
            self.expect(']')
            return SliceNode(node, first, to)
        self.expect(']')
        return MemberNode(node, first)


def resolve(node, env, closure=False):
    """Static checks over the parsed tree."""
    if isinstance(node, IdentifierNode):
        if node.value not in env:
            raise CompileError(f'unknown name {node.value}')
        return
    if isinstance(node, PointerNode):
        if not closure:
            raise CompileError('cannot use pointer accessor outside closure')
        return
    if isinstance(node, BuiltinNode):
        entry = builtins.BUILTINS.get(node.name)
        if entry is None:
            raise CompileError(f'unknown builtin {node.name}')
        n = len(node.arguments)
        if not entry.min_args <= n <= entry.max_args:
            raise CompileError(f'invalid number of arguments for {node.name} (got {n})')
        if node.name in builtins.PREDICATES:
            collection, body = node.arguments
            resolve(collection, env, closure)
            resolve(body, env, closure=True)
            return
    if isinstance(node, CallNode) and isinstance(node.callee, IdentifierNode):
        value = env.get(node.callee.value)
        if node.callee.value in env and not callable(value):
            raise CompileError(f'{node.callee.value} is not callable')
        arity = getattr(value, 'arity', None)
        if arity is not None and arity != len(node.arguments):
            raise CompileError(f'invalid number of arguments for {node.callee.value}')
    for child in node.children:
        resolve(child, env, closure)


def compile(source, env=ENV):
    node = Parser(source, env).parse()
    resolve(node, env)
    return Program(source, node, env)
