import logging
import random
from collections import Counter

import numpy as np
from easydict import EasyDict as edict

from .checker import ReferenceChecker
from .corpus import Corpus
from .errors import CompileError, EvalError, GeneratorFault
from .generate_recursive import TreeBuilder

logger = logging.getLogger(__name__)

OUTCOMES = ('compile', 'eval', 'duplicate', 'accepted')


class Stats:
    """Per-outcome counters of a generation run. Constant size, whatever its length."""

    def __init__(self):
        self.outcomes = Counter()
        self.depths = Counter()
        self.height_total = 0
        self.height_count = 0

    def record(self, outcome, depth, tree=None):
        self.outcomes[outcome] += 1
        self.depths[depth] += 1
        if outcome == 'accepted' and tree is not None:
            self.height_total += tree.height
            self.height_count += 1

    @property
    def attempts(self):
        return sum(self.outcomes.values())

    def summary(self):
        attempts = self.attempts
        # (depth, attempts) rows in depth order
        depths = np.array(sorted(self.depths.items()), dtype=int).reshape(-1, 2)
        return edict(
            attempts=attempts,
            **{k: self.outcomes[k] for k in OUTCOMES},
            acceptance=self.outcomes['accepted'] / attempts if attempts else 0.0,
            mean_height=self.height_total / self.height_count if self.height_count else 0.0,
            mean_depth=float(np.average(depths[:, 0], weights=depths[:, 1])) if depths.size else 0.0,
            depth_histogram=[(int(d), int(n)) for d, n in depths],
        )

    def __str__(self):
        s = self.summary()
        lines = [f"attempts: {s.attempts}  accepted: {s.accepted} ({s.acceptance:.2%})",
                 f"rejected: compile {s.compile}, eval {s.eval}, duplicate {s.duplicate}",
                 f"mean accepted height: {s.mean_height:.2f}",
                 "depth histogram: " + ', '.join(f"{d}:{n}" for d, n in s.depth_histogram)]
        return '\n'.join(lines)


def attempt(builder, checker, corpus, stats=None):
    """
    One build -> render -> compile -> run -> dedup round.
    Returns the accepted text or None. Anything but an expected rejection
    is raised as a GeneratorFault carrying the source.
    """
    source, tree, depth = None, None, None
    try:
        depth = builder.depth()
        tree = builder.build(depth)
        source = tree.render()
        try:
            program = checker.compile(source)
            checker.run(program)
        except CompileError as e:
            outcome = 'compile'
            logger.debug('compile rejected %s: %s', source, e)
        except EvalError as e:
            outcome = 'eval'
            logger.debug('eval rejected %s: %s', source, e)
        else:
            outcome = 'accepted' if corpus.add(source) else 'duplicate'
            if outcome == 'duplicate':
                logger.debug('duplicate %s', source)
    except Exception as e:
        logger.error('internal fault on %r', source)
        raise GeneratorFault(source, tree.tree() if tree is not None else None) from e
    if stats is not None:
        stats.record(outcome, depth, tree)
    return source if outcome == 'accepted' else None


def generate(builder=None, checker=None, corpus=None, weights=None, seed=None,
             limit=None, stats=None):
    """
    Yield distinct accepted expressions in acceptance order, forever or
    until `limit` of them have been produced.
    """
    if builder is None:
        builder = TreeBuilder(weights=weights, rng=random.Random(seed))
    checker = checker or ReferenceChecker()
    corpus = corpus if corpus is not None else Corpus()
    produced = 0
    while limit is None or produced < limit:
        source = attempt(builder, checker, corpus, stats)
        if source is not None:
            produced += 1
            yield source
