import json
import random
from collections import namedtuple
from easydict import EasyDict as edict

WeightedOption = namedtuple('WeightedOption', ['option', 'weight'])


def weighted_choice(options, rng=random):
    """
    Pick one option with probability weight / sum(weights).
    `options` is a non-empty sequence of (option, weight) pairs.
    """
    if not options:
        raise ValueError('weighted_choice needs at least one option')
    total = 0
    for _, weight in options:
        if not isinstance(weight, int) or isinstance(weight, bool) or weight <= 0:
            raise ValueError(f'invalid weight {weight!r}')
        total += weight
    r = rng.random() * total
    acc = 0
    for option, weight in options:
        acc += weight
        if acc > r:
            return option
    return options[-1][0]  # float rounding on r close to total


DEFAULT_WEIGHTS = edict(
    leaf=dict(nil=1, float=1, integer=1, string=1, boolean=1, identifier=10),
    recursive=dict(array=1, map=1, identifier=1000, member=1500, unary=100,
                   binary=2000, call=2000, builtin=500, predicate=1000,
                   pointer=500, slice=100, conditional=100),
    # starting depth of each generated tree
    depth=[(3, 100), (4, 40), (5, 50), (6, 30), (7, 20), (8, 10), (9, 5), (10, 5)],
    # length of argument and item lists
    arity=[(1, 100), (2, 50), (3, 25), (4, 10), (5, 5)],
    property=dict(literal=5, node=1),
    callee=dict(method=2, func=2),
)


def _check_weight(section, key, weight):
    if not isinstance(weight, int) or isinstance(weight, bool) or weight <= 0:
        raise ValueError(f'{section}.{key}: weight must be a positive integer, got {weight!r}')


def _named(section, value, known):
    """Overrides of a name -> weight section."""
    if not isinstance(value, dict):
        raise ValueError(f'{section}: expected a mapping of names to weights, got {type(value).__name__}')
    unknown = set(value) - set(known)
    if unknown:
        raise ValueError(f'unknown {section} entries: {sorted(unknown)}')
    return value


def _pairs(section, value):
    """A (size, weight) table such as depth or arity, replaced as a whole."""
    if not isinstance(value, (list, tuple)):
        raise ValueError(f'{section}: expected a list of [size, weight] pairs, got {type(value).__name__}')
    pairs = []
    for pair in value:
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ValueError(f'{section}: expected a [size, weight] pair, got {pair!r}')
        size, weight = pair
        if not isinstance(size, int) or isinstance(size, bool) or size < 0:
            raise ValueError(f'{section}: size must be a non-negative integer, got {size!r}')
        pairs.append((size, weight))
    return pairs


def load_weights(path=None, **overrides):
    """
    Defaults merged with a JSON file and/or keyword sections, e.g.
    load_weights(recursive=dict(binary=10)). Pair tables (depth, arity)
    are replaced as a whole.
    """
    weights = {k: dict(v) if isinstance(v, dict) else list(v)
               for k, v in DEFAULT_WEIGHTS.items()}
    sources = []
    if path is not None:
        with open(path) as f:
            sources.append(json.load(f))
    sources.append(overrides)
    for source in sources:
        if not isinstance(source, dict):
            raise ValueError(f'weights must be a mapping of sections, got {type(source).__name__}')
        for section, value in source.items():
            if section not in weights:
                raise ValueError(f'unknown weight section {section!r}')
            if isinstance(weights[section], dict):
                weights[section] = {**weights[section], **_named(section, value, weights[section])}
            else:
                weights[section] = _pairs(section, value)
    for section, value in weights.items():
        items = value.items() if isinstance(value, dict) else value
        if not items:
            raise ValueError(f'{section}: empty weight table')
        for key, weight in items:
            _check_weight(section, key, weight)
    return edict(weights)


class Production:
    """One grammar construct: a name, a weight and a generator(builder, depth)."""

    def __init__(self, name, generate, weight=1):
        _check_weight('production', name, weight)
        self.name = name
        self.generate = generate
        self.weight = weight

    def __call__(self, builder, depth):
        return self.generate(builder, depth)

    def __repr__(self):
        return f"PROD:{self.name}({self.weight})"


class ProductionTable:
    """
    Ordered registry of productions. Register by calling the table:
        leaf('nil', nil_node, weight=1)
    """

    def __init__(self, name=''):
        self.name = name
        self._productions = []

    def __call__(self, name, generate, weight=1):
        if name in self:
            raise ValueError(f'{self.name}: duplicate production {name!r}')
        production = Production(name, generate, weight)
        self._productions.append(production)
        return production

    def options(self):
        return [WeightedOption(p, p.weight) for p in self._productions]

    def choose(self, rng=random):
        return weighted_choice(self.options(), rng)

    @property
    def names(self):
        return [p.name for p in self._productions]

    def __getitem__(self, name):
        for p in self._productions:
            if p.name == name:
                return p
        raise KeyError(name)

    def __contains__(self, name):
        return any(p.name == name for p in self._productions)

    def __iter__(self):
        return iter(self._productions)

    def __len__(self):
        return len(self._productions)

    def __repr__(self):
        return f"TABLE:{self.name}{self.names}"
