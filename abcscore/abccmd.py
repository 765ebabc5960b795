#!/usr/bin/python3

# Driver script for abcscore
#  Copyright (C) 2025  Satoshi Nishimura

import argparse
import os
import sys
import abcscore
from abcscore import *  # noqa: F401,F403


def error_exit(str_or_excp, option=None):
    if option is not None:
        print("Error occurred while evaluating the argument of %r option:" %
              option, file=sys.stderr)
    if isinstance(str_or_excp, Exception):
        print('%s: %s' % (str_or_excp.__class__.__name__, str_or_excp),
              file=sys.stderr)
    else:
        print(str_or_excp, file=sys.stderr)
    sys.exit(1)


def read_input(args):
    if args.abc_string is not None:
        return args.abc_string.replace('\\n', '\n')
    try:
        if args.INFILE == '-':
            return sys.stdin.read()
        with open(args.INFILE, encoding=args.encoding) as f:
            return f.read()
    except Exception as e:
        error_exit(e)


def select_tunes(args, result):
    if args.tune is None:
        return result
    tunes = result.tunes
    if not 0 <= args.tune < len(tunes):
        error_exit("abcscore: error: tune number %d is out of range "
                   "(the input has %d tune(s))" % (args.tune, len(tunes)))
    return ParseResult([tunes[args.tune]], result.diagnostics)


def main():
    parser = argparse.ArgumentParser(
        description=f"""Driver script for abcscore: an ABC Music Notation \
Parser and Score Interpreter
Version {abcscore.__version__}

INFILE is an ABC text file ('-' for the standard input). By default, the
interpreted tunes are written to the standard output in JSON format.""",
        usage='%(prog)s [options] [INFILE]',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""examples:
  abcscore tune.abc
  abcscore -s tune.abc
  abcscore -o tune.json --indent 2 tune.abc
  abcscore -n 0 -q tune.abc
  abcscore -e 'X:1\\nK:C\\nCDEF|'""",
    )
    group1 = parser.add_mutually_exclusive_group()
    group1.add_argument('-s', '--summary', action='store_const',
                        dest='mode', const='s',
                        help="show a summary of each tune in INFILE")
    group1.add_argument('-d', '--diagnostics', action='store_const',
                        dest='mode', const='d',
                        help="show the diagnostics only")
    group1.add_argument('-o', '--output', action='store', dest='outfile',
                        help="write JSON output to OUTFILE")
    group1.add_argument('--show-config', action='store_const',
                        dest='mode', const='c',
                        help="show the configuration values and exit")
    parser.add_argument('--version', action='version',
                        version='abcscore ' + abcscore.__version__)

    group2 = parser.add_argument_group("options")
    group2.add_argument('-e', '--eval', dest='abc_string',
                        help="instead of INFILE, interpret ABC_STRING"
                        " ('\\n' stands for a newline)")
    group2.add_argument('-n', '--tune', type=int,
                        help="select the tune of the given index"
                        " (0-based)")
    group2.add_argument('--indent', type=int,
                        help="indent level of JSON output")
    group2.add_argument('--encoding', default='utf-8',
                        help="specify character encoding of INFILE"
                        " (default: 'utf-8')")
    group2.add_argument('-q', '--quiet', action='store_true',
                        help="do not print diagnostics")

    parser.add_argument('INFILE', nargs='?', help=argparse.SUPPRESS)

    args = parser.parse_args()

    if args.mode == 'c':
        AbcConfig.show_config()
        sys.exit(0)

    if args.outfile is not None:
        args.mode = 'o'
    elif args.mode is None:
        args.mode = 'j'

    cnt = (args.INFILE is not None) + (args.abc_string is not None)
    if cnt == 0:
        error_exit("abcscore: error: one of INFILE or '-e' option "
                   "is required")
    elif cnt > 1:
        error_exit("abcscore: error: '-e' option and INFILE are mutually "
                   "exclusive")

    text = read_input(args)

    # diagnostics are printed below instead of being issued as warnings
    AbcConfig.emit_warnings = False
    try:
        result = interpret_abc(text)
    except Exception as e:
        error_exit(e, '-e/--eval' if args.abc_string is not None else None)
    result = select_tunes(args, result)

    if not args.quiet or args.mode == 'd':
        name = args.INFILE if args.INFILE not in (None, '-') else '<input>'
        for diag in result.diagnostics:
            print("%s:%s" % (os.path.basename(name), diag), file=sys.stderr)

    if args.mode == 's':
        showsummary(result.tunes)
    elif args.mode == 'd':
        if result.diagnostics:
            sys.exit(1)
    elif args.mode == 'o':
        try:
            writejson(result, args.outfile, indent=args.indent,
                      ensure_ascii=False)
        except Exception as e:
            error_exit(e)
    else:
        try:
            writejson(result, indent=args.indent, ensure_ascii=False)
        except BrokenPipeError:
            sys.stdout = os.fdopen(0)


if __name__ == '__main__':
    main()
