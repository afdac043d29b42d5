import random

from .grammar import DEFAULT_WEIGHTS, weighted_choice
from .grammars.expr import expr_grammar
from .checker.builtins import NAMES as BUILTIN_NAMES
from .checker.environment import NAMES


class TreeBuilder:
    """
    Depth-bounded recursive sampler over the expression grammar.

    build(depth) picks a construct from the recursive table while depth > 0
    and from the leaf table otherwise. Generators only recurse through
    build(depth - 1), so every path terminates.
    """

    def __init__(self, weights=None, names=None, builtins=None, rng=None):
        self.weights = weights or DEFAULT_WEIGHTS
        self.leaf, self.recursive = expr_grammar(self.weights)
        self.names = list(names) if names is not None else list(NAMES)
        self.builtins = list(builtins) if builtins is not None else list(BUILTIN_NAMES)
        self.rng = rng or random.Random()
        if not self.names:
            raise ValueError('TreeBuilder needs at least one identifier name')

    def table(self, depth):
        return self.leaf if depth <= 0 else self.recursive

    def build(self, depth):
        production = self.table(depth).choose(self.rng)
        return production(self, depth)

    # helpers for the construct generators

    def choice(self, seq):
        return self.rng.choice(seq)

    def maybe(self):
        return self.rng.random() < 0.5

    def weighted(self, section):
        """Key of a weight section, e.g. weighted('callee') -> 'method'."""
        table = self.weights[section]
        items = table.items() if isinstance(table, dict) else table
        return weighted_choice(list(items), self.rng)

    def arity(self):
        return self.weighted('arity')

    def depth(self):
        return self.weighted('depth')

    def children(self, n, depth):
        return [self.build(depth - 1) for _ in range(n)]

