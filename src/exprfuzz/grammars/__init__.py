from .expr import expr_grammar, BINARY_OPERATORS, UNARY_OPERATORS
