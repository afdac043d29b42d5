from .errors import (ExprFuzzError, Rejected, CompileError, EvalError,
                     CheckerFault, GeneratorFault)
from .grammar import (WeightedOption, weighted_choice, Production, ProductionTable,
                      DEFAULT_WEIGHTS, load_weights)
from .production import Node
from .grammars import expr_grammar
from .generate_recursive import TreeBuilder
from .corpus import Corpus
from .checker import ReferenceChecker, ExternalChecker, ENV
from .generate import generate, attempt, Stats

__version__ = '0.1.0'
