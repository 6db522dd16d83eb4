#!/usr/bin/env python
"""The scientific calculator command-line interface"""

BANNER = r"""
                  _     A Scientific
             ___ (_)  ___  _   _| _   | _._|_ _ ._
            (_-< | | / _|  \_(_||(_|_||(_| |_(_)|
            /__/ |_| \__|
                     sin cos tan sqrt log ln exp fact pow
"""

import argparse
import logging
import sys


def stderr(*args, **kwargs):
    print(*args, file=sys.stderr, **kwargs)


import scicalclib

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='scicalc',
        description='Evaluate scientific arithmetic expressions.')
    parser.add_argument('-e', '--expression', action='append', dest='expressions',
                        metavar='EXPR',
                        help='evaluate EXPR and exit (may be given more than once)')
    parser.add_argument('--strict', action='store_true',
                        help='reject characters that are not part of an expression')
    parser.add_argument('--legacy', action='store_true',
                        help='print 0 instead of an error when evaluation fails')
    parser.add_argument('--rpn', action='store_true',
                        help='also print each expression in reverse Polish notation')
    parser.add_argument('--format', default='%g', dest='fmt',
                        help='printf-style format for results (default: %(default)s)')
    parser.add_argument('--no-banner', action='store_true',
                        help='do not print the banner in interactive mode')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log the tokens and RPN of each expression')
    args = parser.parse_args(argv)
    try:
        args.fmt % 1.0
    except (TypeError, ValueError) as ex:
        parser.error("invalid --format %r: %s" % (args.fmt, ex))
    return args

def calculate(expr, args):
    """Evaluate one expression and print the result."""
    if args.rpn:
        try:
            rpn = scicalclib.to_rpn(scicalclib.tokenize(expr, strict=args.strict))
            print('rpn:', scicalclib.format_rpn(rpn))
        except scicalclib.CalcError:
            # --legacy prints 0 for these below
            if not args.legacy:
                raise
    res = scicalclib.evaluate(expr, strict=args.strict, zero_on_error=args.legacy)
    # OverflowError or ValueError when e.g. %d meets inf or nan
    print(args.fmt % res)

def run_expressions(args):
    status = 0
    for expr in args.expressions:
        try:
            calculate(expr, args)
        except (scicalclib.CalcError, OverflowError, ValueError) as ex:
            stderr('error:', ex)
            status = 1
    return status

def repl(args):
    if not args.no_banner:
        stderr(BANNER)
    try:
        while True:
            try:
                expr = input('calc> ').strip()
                if expr:
                    calculate(expr, args)
            except (scicalclib.CalcError, OverflowError, ValueError) as ex:
                stderr('error:', ex)
    except EOFError:
        stderr('\ncaught EOF')
    except KeyboardInterrupt:
        stderr('\ninterrupted')
    return 0

def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.debug("options: %s", args)
    if args.expressions:
        return run_expressions(args)
    return repl(args)

if __name__ == '__main__':
    sys.exit(main())
