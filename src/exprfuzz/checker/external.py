import logging
import shlex
import subprocess
from dataclasses import dataclass

from ..errors import CheckerFault, CompileError, EvalError

logger = logging.getLogger(__name__)

ACCEPTED, COMPILE_REJECTED, EVAL_REJECTED = 0, 3, 4


@dataclass
class Outcome:
    source: str
    status: int
    stderr: str = ''


class ExternalChecker:
    """
    Validates expressions with an out-of-process implementation.
    The command reads one expression on stdin and reports through its exit
    status: 0 accepted, 3 compile rejection, 4 evaluation rejection.
    Anything else (a crash, a signal, a timeout) is a CheckerFault.
    """

    def __init__(self, command, timeout=20):
        self.command = shlex.split(command) if isinstance(command, str) else list(command)
        self.timeout = timeout

    def _call(self, source):
        try:
            result = subprocess.run(self.command, input=source, text=True,
                                    capture_output=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise CheckerFault(f'{self.command[0]} timed out after {self.timeout}s') from e
        return Outcome(source, result.returncode, result.stderr)

    def compile(self, source):
        outcome = self._call(source)
        if outcome.status == COMPILE_REJECTED:
            raise CompileError(outcome.stderr.strip())
        if outcome.status not in (ACCEPTED, EVAL_REJECTED):
            logger.error('%s exited with %d', self.command[0], outcome.status)
            raise CheckerFault(f'{self.command[0]} exited with {outcome.status}:\n{outcome.stderr}')
        return outcome

    def run(self, program):
        if program.status == EVAL_REJECTED:
            raise EvalError(program.stderr.strip())
        return None
