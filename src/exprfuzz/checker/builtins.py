import json
from collections import namedtuple
from .environment import is_int

Builtin = namedtuple('Builtin', ['name', 'min_args', 'max_args', 'impl'])

BUILTINS = {}
PREDICATES = ['all', 'none', 'any', 'one', 'filter', 'map', 'count']


def builtin(name, min_args=1, max_args=None):
    def register(func):
        BUILTINS[name] = Builtin(name, min_args, max_args or min_args, func)
        return func
    return register


def is_number(x):
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _string(x, name):
    if not isinstance(x, str):
        raise TypeError(f'{name}: {type_name(x)} is not a string')
    return x


def _array(x, name):
    if not isinstance(x, list):
        raise TypeError(f'{name}: {type_name(x)} is not an array')
    return x


def type_name(x):
    if x is None:
        return 'nil'
    if isinstance(x, bool):
        return 'bool'
    if is_int(x):
        return 'int'
    if isinstance(x, float):
        return 'float'
    if isinstance(x, str):
        return 'string'
    if isinstance(x, list):
        return 'array'
    if isinstance(x, dict):
        return 'map'
    if callable(x):
        return 'func'
    return 'unknown'


@builtin('len')
def _len(x):
    if not isinstance(x, (str, list, dict)):
        raise TypeError(f'len: invalid argument {type_name(x)}')
    return len(x)


@builtin('abs')
def _abs(x):
    if not is_number(x):
        raise TypeError(f'abs: invalid argument {type_name(x)}')
    return abs(x)


@builtin('int')
def _int(x):
    if isinstance(x, str):
        return int(x)
    if not is_number(x):
        raise TypeError(f'int: invalid argument {type_name(x)}')
    return int(x)


@builtin('float')
def _float(x):
    if isinstance(x, str):
        return float(x)
    if not is_number(x):
        raise TypeError(f'float: invalid argument {type_name(x)}')
    return float(x)


@builtin('string')
def _str(x):
    return to_json(x) if not isinstance(x, str) else x


@builtin('type')
def _type(x):
    return type_name(x)


@builtin('trim', 1, 2)
def _trim(s, chars=None):
    return _string(s, 'trim').strip(None if chars is None else _string(chars, 'trim'))


@builtin('upper')
def _upper(s):
    return _string(s, 'upper').upper()


@builtin('lower')
def _lower(s):
    return _string(s, 'lower').lower()


@builtin('split', 2)
def _split(s, sep):
    sep = _string(sep, 'split')
    if not sep:
        return list(_string(s, 'split'))
    return _string(s, 'split').split(sep)


@builtin('join', 1, 2)
def _join(xs, sep=''):
    items = _array(xs, 'join')
    return _string(sep, 'join').join(_string(x, 'join') for x in items)


@builtin('indexOf', 2)
def _index_of(s, sub):
    return _string(s, 'indexOf').find(_string(sub, 'indexOf'))


@builtin('hasPrefix', 2)
def _has_prefix(s, prefix):
    return _string(s, 'hasPrefix').startswith(_string(prefix, 'hasPrefix'))


@builtin('hasSuffix', 2)
def _has_suffix(s, suffix):
    return _string(s, 'hasSuffix').endswith(_string(suffix, 'hasSuffix'))


def _numbers(name, args):
    if len(args) == 1 and isinstance(args[0], list):
        args = args[0]
    if not args:
        raise ValueError(f'{name}: no values')
    for x in args:
        if not is_number(x):
            raise TypeError(f'{name}: invalid argument {type_name(x)}')
    return args


@builtin('max', 1, 5)
def _max(*args):
    return max(_numbers('max', args))


@builtin('min', 1, 5)
def _min(*args):
    return min(_numbers('min', args))


@builtin('sum')
def _sum(xs):
    xs = _array(xs, 'sum')
    return sum(_numbers('sum', [xs])) if xs else 0


@builtin('first')
def _first(xs):
    xs = _array(xs, 'first')
    return xs[0] if xs else None


@builtin('last')
def _last(xs):
    xs = _array(xs, 'last')
    return xs[-1] if xs else None


@builtin('keys')
def _keys(m):
    if not isinstance(m, dict):
        raise TypeError(f'keys: {type_name(m)} is not a map')
    return sorted(m)


@builtin('values')
def _values(m):
    if not isinstance(m, dict):
        raise TypeError(f'values: {type_name(m)} is not a map')
    return [m[k] for k in sorted(m)]


def to_json(x):
    if callable(x):
        raise TypeError('cannot encode func')
    return json.dumps(x, sort_keys=True, allow_nan=False)


builtin('toJSON')(to_json)


# predicates take (collection, body); the evaluator runs the body per element
for _name in PREDICATES:
    BUILTINS[_name] = Builtin(_name, 2, 2, None)

NAMES = sorted(BUILTINS)
