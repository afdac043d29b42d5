class ExprFuzzError(Exception):
    pass


class Rejected(ExprFuzzError):
    """Expected rejection of a generated expression. The loop discards and retries."""


class CompileError(Rejected):
    pass


class EvalError(Rejected):
    pass


class CheckerFault(ExprFuzzError):
    """The compiler/evaluator itself misbehaved (crash, hang, unknown status)."""


class GeneratorFault(ExprFuzzError):
    """Unexpected failure while producing or validating one expression.

    Carries the source text (when rendering got that far) and the tree dump,
    so the offending input can be reproduced.
    """

    def __init__(self, source, tree=None):
        self.source = source
        self.tree = tree
        super().__init__(f"internal fault on {source!r}")
