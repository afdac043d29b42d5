from ..errors import CheckerFault, CompileError, EvalError, Rejected
from . import builtins, environment
from .compiler import Program, compile
from .environment import ENV
from .external import ExternalChecker
from .vm import run


class ReferenceChecker:
    """In-process compiler and evaluator over a fixed environment."""

    def __init__(self, env=ENV):
        self.env = env

    def compile(self, source):
        return compile(source, self.env)

    def run(self, program):
        return run(program, self.env)


def get_checker(name='reference', command=None, timeout=20):
    if name == 'reference':
        return ReferenceChecker()
    if name == 'external':
        if not command:
            raise ValueError('the external checker needs a command')
        return ExternalChecker(command, timeout=timeout)
    raise ValueError(f'unknown checker {name!r}')
