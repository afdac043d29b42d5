from types import MappingProxyType


def is_int(x):
    return isinstance(x, int) and not isinstance(x, bool)


def typed(*types):
    """Reject arguments of the wrong kind the way a typed host function would."""
    def decorator(func):
        def wrapper(*args):
            if len(args) != len(types):
                raise TypeError(f'{func.__name__}: want {len(types)} arguments, got {len(args)}')
            for arg, t in zip(args, types):
                if t is int and not is_int(arg):
                    raise TypeError(f'{func.__name__}: {arg!r} is not an integer')
            return func(*args)
        wrapper.__name__ = func.__name__
        wrapper.arity = len(types)
        return wrapper
    return decorator


@typed(int)
def fn(a):
    return a + 1


def head(*xs):
    return xs[0]


@typed(int, int)
def add(a, b):
    return a + b


@typed(int, int)
def div(a, b):
    # integer division truncating towards zero
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


ENV = MappingProxyType({
    'a': 1,
    'b': 2,
    'f': 0.5,
    'ok': True,
    's': 'abc',
    'arr': [1, 2, 3],
    'obj': {
        'a': 1,
        'b': 2,
        'obj': {
            'a': 1,
            'b': 2,
            'obj': {'a': 1, 'b': 2},
        },
        'fn': fn,
        'head': head,
    },
    'add': add,
    'div': div,
})

NAMES = sorted(ENV)

# callables exposed for call expressions
FUNCTION_NAMES = ['add', 'div']
METHOD_NAMES = ['fn', 'head']
