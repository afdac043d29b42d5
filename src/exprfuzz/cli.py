import argparse
import logging
import random
import sys
import traceback

from tqdm.auto import tqdm

from .checker import get_checker
from .errors import GeneratorFault
from .generate import Stats, generate
from .generate_recursive import TreeBuilder
from .grammar import load_weights

BANNER = '=' * 26


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='exprfuzz',
        description='Print distinct, valid random expressions, one per line, until interrupted.')
    parser.add_argument('--seed', type=int, default=None, help='random seed for a reproducible run')
    parser.add_argument('-n', '--count', type=int, default=None,
                        help='stop after this many expressions (default: run forever)')
    parser.add_argument('--weights', default=None, help='JSON file overriding construct weights')
    parser.add_argument('--checker', choices=['reference', 'external'], default='reference')
    parser.add_argument('--command', default=None,
                        help='external checker command (reads one expression on stdin)')
    parser.add_argument('--timeout', type=float, default=20, help='external checker timeout in seconds')
    parser.add_argument('--progress', action='store_true', help='show a progress bar on stderr')
    parser.add_argument('--stats', action='store_true', help='print run statistics on stderr at exit')
    parser.add_argument('-v', '--verbose', action='store_true', help='log rejections on stderr')
    return parser.parse_args(argv)


def report_fault(fault, file=sys.stderr):
    print(BANNER, file=file)
    print(fault.source if fault.source is not None else '<no source rendered>', file=file)
    print(BANNER, file=file)
    if fault.tree:
        print(fault.tree, file=file)
    traceback.print_exception(fault.__cause__ or fault, file=file)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        stream=sys.stderr, format='%(levelname)s %(name)s: %(message)s')
    try:
        weights = load_weights(args.weights)
        checker = get_checker(args.checker, command=args.command, timeout=args.timeout)
    except (OSError, ValueError) as e:
        print(f'exprfuzz: {e}', file=sys.stderr)
        return 2

    builder = TreeBuilder(weights=weights, rng=random.Random(args.seed))
    stats = Stats()
    progress = tqdm(total=args.count, unit='expr', file=sys.stderr, disable=not args.progress)
    status = 0
    try:
        for source in generate(builder=builder, checker=checker, limit=args.count, stats=stats):
            print(source, flush=True)
            progress.update()
    except (KeyboardInterrupt, BrokenPipeError):
        pass
    except GeneratorFault as fault:
        report_fault(fault)
        status = 1
    finally:
        progress.close()
        if args.stats:
            print(stats, file=sys.stderr)
    return status
