#!/usr/bin/env python
"""scicalclib - Stuff used by scicalc"""

# ---------------------------
#  The Process in a Nutshell
# ---------------------------
#
#             +------------+     +----------+     +------------+
# [input] >>> | tokenize() | >>> | to_rpn() | >>> | eval_rpn() | >>> [result]
#          |  +------------+  |  +----------+  |  +------------+  |
#          |                  |                |                  |
#        string         list of tokens   tokens in RPN          float

import logging
import math
import operator

from collections import namedtuple
from functools import reduce
from types import MappingProxyType

logger = logging.getLogger(__name__)

LEFT, RIGHT = 1, 2

# Token kinds
NUMBER = 'number'
OPERATOR = 'operator'
FUNCTION = 'function'
CONSTANT = 'constant'
LPAREN = 'lparen'
RPAREN = 'rparen'
COMMA = 'comma'

INF = float('inf')
NAN = float('nan')

# fact(171) no longer fits in a float
MAX_FACTORIAL = 170


class CalcError(ValueError):
    """Base class for everything that can go wrong in a calculation."""
    code = 'calc_error'

    def __init__(self, message, pos=None):
        ValueError.__init__(self, message)
        self.pos = pos

class LexError(CalcError):
    code = 'lex_error'

class CalcSyntaxError(CalcError):
    code = 'syntax_error'

class MisplacedComma(CalcSyntaxError):
    code = 'misplaced_comma'

class UnmatchedParen(CalcSyntaxError):
    code = 'unmatched_paren'

class CalcEvalError(CalcError):
    code = 'eval_error'

class BadNumber(CalcEvalError):
    code = 'bad_number'

class UnknownConstant(CalcEvalError):
    code = 'unknown_constant'

class InsufficientOperands(CalcEvalError):
    code = 'insufficient_operands'

class InsufficientArguments(CalcEvalError):
    code = 'insufficient_arguments'

class NegativeFactorial(CalcEvalError):
    code = 'negative_factorial'

class MalformedExpression(CalcEvalError):
    code = 'malformed_expression'


class Token(namedtuple('Token', 'text kind pos')):
    """The smallest meaningful piece of an expression.

    ``text`` is the exact substring the token was made from, ``kind`` is
    one of the token kind constants above and ``pos`` is the index of
    its first character in the input string.
    """
    __slots__ = ()

    def __str__(self):
        return self.text


class Operator:
    """A binary infix operator, e.g. ``+`` or ``^``."""

    def __init__(self, name, rank, assoc, func):
        self.name = name
        self.rank = rank
        self.assoc = assoc
        self.func = func

    def __call__(self, a, b):
        return self.func(a, b)

    def __repr__(self):
        return 'Operator(%r, rank=%d)' % (self.name, self.rank)


class Function:
    """A named function applied with call syntax, e.g. ``sqrt(16)``."""

    def __init__(self, name, nargs, func):
        self.name = name
        self.nargs = nargs
        self.func = func

    def __call__(self, *args):
        return self.func(*args)

    def __repr__(self):
        return 'Function(%r, nargs=%d)' % (self.name, self.nargs)


def float_semantics(func):
    """Make a math function behave like IEEE floating point.

    The math module raises ValueError on domain errors and OverflowError
    when the result is too large; a calculator wants ``nan`` and ``inf``
    back instead.
    """
    def newfunc(*args):
        try:
            return func(*args)
        except OverflowError:
            return INF
        except ValueError:
            return NAN
    newfunc.__name__ = func.__name__
    return newfunc

def divide(a, b):
    """Division that follows floating point rules for a zero divisor."""
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0 or math.isnan(a):
            return NAN
        return math.copysign(INF, a) * math.copysign(1.0, b)

def _is_odd_integer(x):
    return math.isfinite(x) and x == int(x) and int(x) % 2 == 1

def power(a, b):
    """``a`` raised to ``b``, with IEEE results where math.pow raises."""
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0 and _is_odd_integer(b):
            return -INF
        return INF
    except ValueError:
        # 0 to a negative power is a pole, not a domain error
        if a == 0:
            if _is_odd_integer(b):
                return math.copysign(INF, a)
            return INF
        return NAN

def logarithm(func):
    """Wrap a logarithm so that log(0) is -inf and log(-x) is nan."""
    def newfunc(x):
        if x == 0:
            return -INF
        if x < 0 or math.isnan(x):
            return NAN
        return func(x)
    newfunc.__name__ = func.__name__
    return newfunc

def degrees(func):
    """Make a trigonometric function take its argument in degrees."""
    func = float_semantics(func)
    def newfunc(x):
        return func(math.radians(x))
    newfunc.__name__ = func.__name__
    return newfunc

def factorial(num):
    """Factorial function.

    The argument is rounded half up to the nearest integer first.
    """
    if math.isnan(num):
        # nan propagates instead of rounding to 0, so fact(0/0) is nan, not 1
        return NAN
    rounded = num + 0.5
    if rounded < 0:
        raise NegativeFactorial(
            "cannot calculate factorial of %s: number must be non-negative" % _fmt(num))
    if rounded >= MAX_FACTORIAL + 1:
        return INF
    return reduce(operator.mul, range(2, math.floor(rounded)+1), 1.0)


binary = MappingProxyType({
    '+': Operator('+', 2, LEFT,  operator.add),
    '-': Operator('-', 2, LEFT,  operator.sub),
    '*': Operator('*', 3, LEFT,  operator.mul),
    '/': Operator('/', 3, LEFT,  divide),
    '^': Operator('^', 4, RIGHT, power),
})

functions = MappingProxyType({
    'sin':  Function('sin',  1, degrees(math.sin)),
    'cos':  Function('cos',  1, degrees(math.cos)),
    'tan':  Function('tan',  1, degrees(math.tan)),
    'sqrt': Function('sqrt', 1, float_semantics(math.sqrt)),
    'log':  Function('log',  1, logarithm(math.log10)),
    'ln':   Function('ln',   1, logarithm(math.log)),
    'exp':  Function('exp',  1, float_semantics(math.exp)),
    'fact': Function('fact', 1, factorial),
    'pow':  Function('pow',  2, power),
})

constants = MappingProxyType({
    'pi': math.pi,
    'e': math.e,
})


def _fmt(num):
    return '%g' % num

def _is_number_char(c):
    return c.isdecimal() or c == '.'

def tokenize(s, strict=False):
    """Convert a string into a list of tokens.

    Characters that are neither whitespace nor part of the expression
    language are dropped, unless ``strict`` is true, in which case they
    raise LexError.
    """
    pos = 0
    tokens = []

    while pos < len(s):
        c = s[pos]
        start = pos

        if c.isspace():
            pos += 1
            continue

        # Numbers; "1.2.3" is let through and rejected by eval_rpn()
        if _is_number_char(c):
            while pos < len(s) and _is_number_char(s[pos]):
                pos += 1
            tokens.append(Token(s[start:pos], NUMBER, start))

        # Words can be interpreted as either functions or constants
        elif c.isalpha():
            while pos < len(s) and s[pos].isalpha():
                pos += 1
            word = s[start:pos]
            kind = FUNCTION if word in functions else CONSTANT
            tokens.append(Token(word, kind, start))

        else:
            pos += 1
            if c == ',':
                tokens.append(Token(c, COMMA, start))
            elif c == '(':
                tokens.append(Token(c, LPAREN, start))
            elif c == ')':
                tokens.append(Token(c, RPAREN, start))
            elif c in binary:
                tokens.append(Token(c, OPERATOR, start))
            elif strict:
                raise LexError("invalid character %r at position %d" % (c, start), start)

    logger.debug("tokens: %s", tokens)
    return tokens

def untokenize(tokens):
    """Glue a list of tokens back into a string, without whitespace."""
    return ''.join(token.text for token in tokens)

def to_rpn(tokens):
    """Convert a list of tokens to reverse Polish notation using the
    shunting yard algorithm.

    See <http://en.wikipedia.org/wiki/Shunting_yard_algorithm>
    """
    # Output, in reverse Polish order
    out = []
    # Operator, function and parenthesis stack
    stack = []

    for token in tokens:

        # Number or constant
        if token.kind in (NUMBER, CONSTANT):
            # Write directly to output
            out.append(token)

        # Function; it gets attached to its arguments at the matching ')'
        elif token.kind == FUNCTION:
            stack.append(token)

        # Argument separator
        elif token.kind == COMMA:
            while stack and stack[-1].kind != LPAREN:
                out.append(stack.pop())
            if not stack:
                raise MisplacedComma("comma outside of function call at position %d" % token.pos,
                                     token.pos)

        # Binary operator
        elif token.kind == OPERATOR:
            op = binary[token.text]
            # Pop off any operators that bind at least as tightly
            while stack and stack[-1].kind == OPERATOR:
                top = binary[stack[-1].text]
                if ((op.assoc == LEFT and op.rank <= top.rank)
                        or (op.assoc == RIGHT and op.rank < top.rank)):
                    out.append(stack.pop())
                else:
                    break
            # Then push the current operator onto the stack
            stack.append(token)

        # Left bracket
        elif token.kind == LPAREN:
            stack.append(token)

        # Right bracket
        elif token.kind == RPAREN:
            # Pop off operators, appending them to the output, until we hit a left bracket
            while stack and stack[-1].kind != LPAREN:
                out.append(stack.pop())
            if not stack:
                raise UnmatchedParen("too many right parentheses", token.pos)
            stack.pop() # the left parenthesis
            if stack and stack[-1].kind == FUNCTION:
                out.append(stack.pop())

        else:
            raise ValueError("found foreign object: %s" % repr(token))

    # Finally, pop off anything still on the stack
    while stack:
        token = stack.pop()
        if token.kind in (LPAREN, RPAREN):
            raise UnmatchedParen("too many left parentheses", token.pos)
        out.append(token)

    logger.debug("rpn: %s", format_rpn(out))
    return out

def format_rpn(tokens):
    """Render a list of tokens in reverse Polish order as a string."""
    return ' '.join(token.text for token in tokens)

def parse_number(token):
    """Parse the text of a NUMBER token as an ASCII decimal literal."""
    # float() would also read other scripts' digits, e.g. '١٢'
    if token.text.isascii():
        try:
            return float(token.text)
        except ValueError:
            pass
    raise BadNumber("invalid number: %s" % token.text, token.pos)

def eval_rpn(tokens):
    """Evaluate a list of tokens in reverse Polish order."""
    stack = []

    for token in tokens:
        if token.kind == NUMBER:
            stack.append(parse_number(token))

        elif token.kind == CONSTANT:
            if token.text not in constants:
                raise UnknownConstant("I don't know what '%s' means" % token.text, token.pos)
            stack.append(constants[token.text])

        elif token.kind == OPERATOR:
            if len(stack) < 2:
                raise InsufficientOperands("not enough values for %s" % (token,), token.pos)
            b = stack.pop()
            a = stack.pop()
            stack.append(binary[token.text](a, b))

        elif token.kind == FUNCTION:
            func = functions[token.text]
            if len(stack) < func.nargs:
                raise InsufficientArguments("%s needs %d argument%s" % (
                    func.name, func.nargs, '' if func.nargs == 1 else 's'), token.pos)
            # Replace the function's arguments with the result
            stack[-func.nargs:] = [func(*stack[-func.nargs:])]

        else:
            raise ValueError("found alien object: %s" % repr(token))

    # At the end of the computation, there should be exactly one value
    # left on the stack
    if len(stack) != 1:
        raise MalformedExpression("I don't understand what you're trying to say")
    return stack[0]

def evaluate(s, strict=False, zero_on_error=False):
    """Evaluate the expression in ``s`` and return the result as a float.

    Errors are raised as CalcError subclasses. With ``zero_on_error``
    they are logged and 0.0 is returned instead, which is how the old
    web calculator behaved.
    """
    try:
        return eval_rpn(to_rpn(tokenize(s, strict=strict)))
    except CalcError as ex:
        if not zero_on_error:
            raise
        logger.warning("could not evaluate %r: %s", s, ex)
        return 0.0

def main():
    """Test a few things."""
    for s in ("5+8", "sin(30)", "cos(60)", "sqrt(16)", "log(100)",
              "ln(2.71828)", "exp(1)", "fact(5)", "pow(2,3)",
              "5+8*2", "5+8*2-3/1", "pi + e"):
        print(s.ljust(12), "==>", evaluate(s))

if __name__ == "__main__":
    main()
