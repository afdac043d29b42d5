import json
import re
from anytree import NodeMixin, RenderTree

KEYWORDS = {'nil', 'true', 'false', 'not', 'and', 'or', 'in',
            'matches', 'contains', 'startsWith', 'endsWith'}

IDENTIFIER = re.compile(r'[A-Za-z_$][A-Za-z0-9_$]*\Z')

# binary operator -> (precedence, right associative)
BINARY_PRECEDENCE = {
    'or': (10, False), '||': (10, False),
    'and': (15, False), '&&': (15, False),
    '==': (20, False), '!=': (20, False),
    '<': (20, False), '>': (20, False), '<=': (20, False), '>=': (20, False),
    'in': (20, False), 'matches': (20, False), 'contains': (20, False),
    'startsWith': (20, False), 'endsWith': (20, False),
    '..': (25, False),
    '+': (30, False), '-': (30, False),
    '*': (60, False), '/': (60, False), '%': (60, False),
    '**': (100, True), '^': (100, True),
}

UNARY_PRECEDENCE = {'not': 50, '!': 50, '-': 90}


def is_identifier(s):
    return bool(IDENTIFIER.match(s)) and s not in KEYWORDS


class Node(NodeMixin):
    """
    Base AST node. Children are attached through anytree, so every node
    belongs to exactly one parent and a tree never shares subtrees.
    """
    def __init__(self, *children):
        self.children = [c for c in children if c is not None]

    def render(self):
        raise NotImplementedError

    def __str__(self):
        return self.render()

    def tree(self):
        """anytree dump of the node, used in crash reports."""
        return '\n'.join(f"{pre}{node!r}" for pre, _, node in RenderTree(self))

    def __repr__(self):
        return type(self).__name__


class NilNode(Node):
    def render(self):
        return 'nil'


class Literal(Node):
    def __init__(self, value):
        super().__init__()
        self.value = value

    def __repr__(self):
        return f"{type(self).__name__}({self.value!r})"


class FloatNode(Literal):
    def render(self):
        return repr(float(self.value))


class IntegerNode(Literal):
    def render(self):
        return str(int(self.value))


class StringNode(Literal):
    def render(self):
        return json.dumps(self.value)


class BoolNode(Literal):
    def render(self):
        return 'true' if self.value else 'false'


class IdentifierNode(Literal):
    def render(self):
        return self.value


class PointerNode(Node):
    """The current element inside a predicate body."""
    def render(self):
        return '#'


def _postfix_base(node):
    text = node.render()
    if isinstance(node, (UnaryNode, BinaryNode, ConditionalNode)):
        return f"({text})"
    return text


def _wrap(node):
    text = node.render()
    return f"({text})" if isinstance(node, ConditionalNode) else text


def _arguments(nodes):
    return ', '.join(_wrap(n) for n in nodes)


class MemberNode(Node):
    def __init__(self, node, property, optional=False):
        super().__init__(node, property)
        self.node, self.property, self.optional = node, property, optional

    def render(self):
        base, prop = _postfix_base(self.node), self.property
        if isinstance(prop, StringNode) and is_identifier(prop.value):
            return f"{base}{'?.' if self.optional else '.'}{prop.value}"
        return f"{base}{'?.' if self.optional else ''}[{_wrap(prop)}]"

    def __repr__(self):
        return f"MemberNode(optional={self.optional})"


class UnaryNode(Node):
    def __init__(self, operator, node):
        super().__init__(node)
        self.operator, self.node = operator, node

    @property
    def precedence(self):
        return UNARY_PRECEDENCE[self.operator]

    def render(self):
        operand = self.node.render()
        if isinstance(self.node, (BinaryNode, ConditionalNode)) or \
                (isinstance(self.node, UnaryNode) and self.node.precedence < self.precedence):
            operand = f"({operand})"
        sep = ' ' if self.operator == 'not' else ''
        return f"{self.operator}{sep}{operand}"

    def __repr__(self):
        return f"UnaryNode({self.operator!r})"


class BinaryNode(Node):
    def __init__(self, operator, left, right):
        super().__init__(left, right)
        self.operator, self.left, self.right = operator, left, right

    @property
    def precedence(self):
        return BINARY_PRECEDENCE[self.operator][0]

    def _operand(self, node, side):
        text = node.render()
        prec, right_assoc = BINARY_PRECEDENCE[self.operator]
        if isinstance(node, ConditionalNode):
            return f"({text})"
        if isinstance(node, UnaryNode) and node.precedence < prec:
            return f"({text})"
        if isinstance(node, BinaryNode):
            # equal precedence only binds without parens on the associative side
            assoc_side = 'right' if right_assoc else 'left'
            if node.precedence < prec or (node.precedence == prec and side != assoc_side):
                return f"({text})"
        return text

    def render(self):
        return f"{self._operand(self.left, 'left')} {self.operator} {self._operand(self.right, 'right')}"

    def __repr__(self):
        return f"BinaryNode({self.operator!r})"


class CallNode(Node):
    def __init__(self, callee, arguments):
        super().__init__(callee, *arguments)
        self.callee, self.arguments = callee, list(arguments)

    def render(self):
        return f"{_postfix_base(self.callee)}({_arguments(self.arguments)})"


class BuiltinNode(Node):
    def __init__(self, name, arguments):
        super().__init__(*arguments)
        self.name, self.arguments = name, list(arguments)

    def render(self):
        return f"{self.name}({_arguments(self.arguments)})"

    def __repr__(self):
        return f"BuiltinNode({self.name!r})"


class ArrayNode(Node):
    def __init__(self, nodes):
        super().__init__(*nodes)
        self.nodes = list(nodes)

    def render(self):
        return f"[{_arguments(self.nodes)}]"


class PairNode(Node):
    def __init__(self, key, value):
        super().__init__(key, value)
        self.key, self.value = key, value

    def render(self):
        return f"{self.key.render()}: {_wrap(self.value)}"


class MapNode(Node):
    def __init__(self, pairs):
        super().__init__(*pairs)
        self.pairs = list(pairs)

    def render(self):
        return '{' + ', '.join(p.render() for p in self.pairs) + '}'


class SliceNode(Node):
    def __init__(self, node, from_=None, to=None):
        super().__init__(node, from_, to)
        self.node, self.from_, self.to = node, from_, to

    def render(self):
        lo = _wrap(self.from_) if self.from_ is not None else ''
        hi = _wrap(self.to) if self.to is not None else ''
        return f"{_postfix_base(self.node)}[{lo}:{hi}]"


class ConditionalNode(Node):
    def __init__(self, cond, exp1, exp2):
        super().__init__(cond, exp1, exp2)
        self.cond, self.exp1, self.exp2 = cond, exp1, exp2

    def render(self):
        return f"{_wrap(self.cond)} ? {_wrap(self.exp1)} : {_wrap(self.exp2)}"


LEAF_TYPES = (NilNode, FloatNode, IntegerNode, StringNode, BoolNode, IdentifierNode)
