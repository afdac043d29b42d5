import pytest

from exprfuzz.checker import ReferenceChecker, compile, run
from exprfuzz.corpus import Corpus
from exprfuzz.errors import GeneratorFault
from exprfuzz.generate import Stats, attempt, generate
from exprfuzz.production import BinaryNode, IdentifierNode, IntegerNode, MemberNode, StringNode


class FixedBuilder:
    """Always builds the same tree."""

    def __init__(self, make):
        self.make = make

    def depth(self):
        return 3

    def build(self, depth):
        return self.make()


class BrokenBuilder(FixedBuilder):
    def build(self, depth):
        raise AttributeError('no such production')


class CrashingChecker(ReferenceChecker):
    def run(self, program):
        raise RuntimeError('checker blew up')


def nested_member():
    return MemberNode(MemberNode(IdentifierNode('obj'), StringNode('obj')), StringNode('a'))


def division_by_zero():
    return BinaryNode('/', IntegerNode(1), IntegerNode(0))


def test_corpus():
    corpus = Corpus(['a'])
    assert 'a' in corpus
    assert not corpus.add('a')
    assert corpus.add('b')
    assert not corpus.add('b')
    assert len(corpus) == 2
    assert sorted(corpus) == ['a', 'b']


def test_generate_yields_distinct_valid_expressions():
    texts = list(generate(seed=11, limit=20))
    assert len(texts) == 20
    assert len(set(texts)) == 20
    for text in texts:
        run(compile(text))


def test_generate_is_reproducible():
    assert list(generate(seed=5, limit=10)) == list(generate(seed=5, limit=10))


def test_duplicates_are_dropped():
    builder, corpus, stats = FixedBuilder(nested_member), Corpus(), Stats()
    checker = ReferenceChecker()
    assert attempt(builder, checker, corpus, stats) == 'obj.obj.a'
    assert attempt(builder, checker, corpus, stats) is None
    assert stats.outcomes['accepted'] == 1
    assert stats.outcomes['duplicate'] == 1
    assert len(corpus) == 1


def test_division_by_zero_is_an_eval_rejection():
    stats = Stats()
    assert attempt(FixedBuilder(division_by_zero), ReferenceChecker(), Corpus(), stats) is None
    assert stats.outcomes['eval'] == 1
    assert stats.attempts == 1


def test_builder_fault_is_fatal():
    with pytest.raises(GeneratorFault) as info:
        attempt(BrokenBuilder(nested_member), ReferenceChecker(), Corpus())
    assert info.value.source is None
    assert isinstance(info.value.__cause__, AttributeError)


def test_checker_fault_carries_the_source():
    with pytest.raises(GeneratorFault) as info:
        attempt(FixedBuilder(nested_member), CrashingChecker(), Corpus())
    assert info.value.source == 'obj.obj.a'
    assert 'MemberNode' in info.value.tree
    assert isinstance(info.value.__cause__, RuntimeError)


def test_generate_stops_on_fault():
    stream = generate(builder=FixedBuilder(nested_member), checker=CrashingChecker())
    with pytest.raises(GeneratorFault):
        next(stream)


def test_stats_summary():
    stats = Stats()
    list(generate(seed=3, limit=15, stats=stats))
    s = stats.summary()
    assert s.accepted == 15
    assert s.attempts == s.accepted + s.compile + s.eval + s.duplicate
    assert 0 < s.acceptance <= 1
    assert s.mean_height >= 0
    assert sum(n for _, n in s.depth_histogram) == s.attempts
    assert all(3 <= d <= 10 for d, _ in s.depth_histogram)
    assert 'attempts' in str(stats)


def test_empty_stats():
    s = Stats().summary()
    assert s.attempts == 0 and s.acceptance == 0.0 and s.depth_histogram == []


def test_stats_keep_constant_size():
    stats = Stats()
    tree = nested_member()
    for i in range(10_000):
        stats.record('accepted' if i % 2 else 'compile', 3 + i % 2, tree)
    assert stats.depths == {3: 5_000, 4: 5_000}
    s = stats.summary()
    assert s.attempts == 10_000 and s.accepted == 5_000
    assert s.mean_height == tree.height == 2
    assert s.mean_depth == 3.5
    assert s.depth_histogram == [(3, 5_000), (4, 5_000)]
