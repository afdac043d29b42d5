import random
import sys

import pytest
from hypothesis import given, settings, strategies as st

from exprfuzz.checker import ExternalChecker, ReferenceChecker, get_checker
from exprfuzz.checker.compiler import Parser, compile, tokenize
from exprfuzz.checker.environment import ENV
from exprfuzz.checker.vm import Frame, evaluate as evaluate_node, run
from exprfuzz.errors import CheckerFault, CompileError, EvalError, Rejected
from exprfuzz.generate_recursive import TreeBuilder


def evaluate(source):
    return run(compile(source))


@pytest.mark.parametrize('source, value', [
    ('obj.obj.a', 1),
    ('obj.obj.obj.b', 2),
    ('obj?.missing', None),
    ('obj["a"]', 1),
    ('arr[0] + arr[-1]', 4),
    ('arr?.[7]', None),
    ('s[0:2]', 'ab'),
    ('arr[1:]', [2, 3]),
    ('add(1, 2)', 3),
    ('div(7, 2)', 3),
    ('obj.fn(a)', 2),
    ('obj?.head(s, 1)', 'abc'),
    ('1 .. 3', [1, 2, 3]),
    ('f * 2', 1.0),
    ('b ** 3', 8.0),
    ('2 ^ 2 ^ 3', 256.0),
    ('7 % 3', 1),
    ('"abc" matches "b"', True),
    ('s contains "bc"', True),
    ('s startsWith "a" and s endsWith "c"', True),
    ('2 in arr', True),
    ('"obj" in obj', True),
    ('not ok', False),
    ('!ok || ok', True),
    ('-a', -1),
    ('ok ? 1 : 2', 1),
    ('nil == nil', True),
    ('1 == 1.0', True),
    ('ok == 1', False),
    ('[1, "a"]', [1, 'a']),
    ('{"a": 1, b: 2}', {'a': 1, 'b': 2}),
    ('filter(arr, # > 1)', [2, 3]),
    ('map(arr, # * 2)', [2, 4, 6]),
    ('count(arr, # > 1)', 2),
    ('all(arr, # > 0)', True),
    ('none(arr, # > 5)', True),
    ('any(arr, # == 2)', True),
    ('one(arr, # == 2)', True),
    ('filter(map(arr, [#]), #[0] > 2)', [[3]]),
    ('len(arr)', 3),
    ('upper(s)', 'ABC'),
    ('max(arr)', 3),
    ('min(a, f)', 0.5),
    ('string(arr)', '[1, 2, 3]'),
    ('keys(obj.obj.obj)', ['a', 'b']),
])
def test_evaluates(source, value):
    assert evaluate(source) == value


@pytest.mark.parametrize('source', [
    'unknown',
    '#',
    '# + 1',
    'len(arr, arr)',
    'filter(arr)',
    'add(1)',
    'a(1)',
    '1 +',
    '(a',
    'a b',
    '',
    '@',
])
def test_compile_rejects(source):
    with pytest.raises(CompileError):
        compile(source)


@pytest.mark.parametrize('source', [
    '1 / 0',
    '1 % 0',
    'div(a, 0)',
    'obj.missing',
    'arr[5]',
    'nil.a',
    '1 + true',
    '"a" + 1',
    'ok and 1',
    'not 1',
    '-s',
    's matches "("',
    'add(1.5, 1)',
    'obj.head()',
    'filter(arr, #)',
    'filter(s, # > 1)',
    'arr["a"]',
    'f .. 2',
    'toJSON(obj)',
    '10 ** 400',
    'map(0 .. 9999, 0 .. 9999)',
    'map(0 .. 9999, string(0 .. 9999))',
    'len(map(0 .. 9999, 0 .. 20))',
])
def test_eval_rejects(source):
    program = compile(source)
    with pytest.raises(EvalError):
        run(program)


def test_division_by_zero_is_rejected_not_a_crash():
    checker = ReferenceChecker()
    program = checker.compile('1 / 0')
    with pytest.raises(Rejected):
        checker.run(program)


def test_tokenize():
    kinds = [(t.kind, t.value) for t in tokenize('obj?.a .. 1.5')]
    assert kinds == [('name', 'obj'), ('op', '?.'), ('name', 'a'), ('op', '..'),
                     ('float', '1.5'), ('eof', '')]
    assert [t.value for t in tokenize('a not in b')][:4] == ['a', 'not', 'in', 'b']
    assert [t.value for t in tokenize('0..2')] == ['0', '..', '2', '']


@settings(max_examples=300, deadline=None)
@given(seed=st.integers(0, 2**32 - 1), depth=st.integers(0, 7))
def test_rendered_text_parses_back(seed, depth):
    text = TreeBuilder(rng=random.Random(seed)).build(depth).render()
    assert Parser(text).parse().render() == text


@settings(max_examples=300, deadline=None)
@given(seed=st.integers(0, 2**32 - 1), depth=st.integers(0, 7))
def test_generated_text_is_only_ever_rejected(seed, depth):
    checker = ReferenceChecker()
    text = TreeBuilder(rng=random.Random(seed)).build(depth).render()
    try:
        checker.run(checker.compile(text))
    except Rejected:
        pass


def script(body):
    return [sys.executable, '-c', body]


EXIT_BY_CONTENT = (
    'import sys\n'
    's = sys.stdin.read()\n'
    'sys.exit(3 if "bad" in s else 4 if "boom" in s else 9 if "crash" in s else 0)\n'
)


def test_external_checker_statuses():
    checker = ExternalChecker(script(EXIT_BY_CONTENT), timeout=30)
    assert checker.run(checker.compile('a + b')) is None
    with pytest.raises(CompileError):
        checker.compile('bad')
    program = checker.compile('boom')
    with pytest.raises(EvalError):
        checker.run(program)
    with pytest.raises(CheckerFault):
        checker.compile('crash')


def test_external_checker_timeout():
    checker = ExternalChecker(script('import time; time.sleep(10)'), timeout=0.5)
    with pytest.raises(CheckerFault):
        checker.compile('a')


def test_get_checker():
    assert isinstance(get_checker(), ReferenceChecker)
    assert isinstance(get_checker('external', command='true'), ExternalChecker)
    with pytest.raises(ValueError):
        get_checker('external')
    with pytest.raises(ValueError):
        get_checker('other')


def test_budget_counts_produced_sizes():
    program = compile('0 .. 99')
    frame = Frame(ENV, budget=150)
    assert len(evaluate_node(program.node, frame)) == 100
    # three node visits plus one hundred produced items
    assert frame.budget == 150 - 3 - 100
    with pytest.raises(ValueError):
        evaluate_node(program.node, Frame(ENV, budget=50))
