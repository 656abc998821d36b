# SPDX-License-Identifier: GPL-2.0+
#
# Command-line parser for symprefix
#

from argparse import ArgumentParser

from symprefix.bindings import STYLES


def parse_args(argv):
    """Parse the symprefix command-line arguments

    Args:
        argv (List[str]): List of string arguments

    Returns:
        argparse.Namespace: Parsed arguments, with the subcommand in 'cmd'
    """
    epilog = '''Symprefix adds a prefix to the global symbols in a static
library so it can be linked into a process alongside another copy.'''

    parser = ArgumentParser(prog='symprefix', epilog=epilog)
    parser.add_argument('-D', '--debug', action='store_true',
        help='Enabling debugging (provides a full traceback on error)')
    parser.add_argument('-s', '--settings', type=str,
        help='Settings file to read (INI format, [DEFAULT] section)')
    parser.add_argument('-v', '--verbosity', default=1,
        type=int, help='Control verbosity: 0=errors, 1=warnings, 2=notices, '
        '3=info, 4=detail, 5=debug')

    subparser = parser.add_subparsers(dest='cmd', required=True)
    prefix_parser = subparser.add_parser('prefix',
        help='Add the prefix to symbols in the static archives')
    prefix_parser.add_argument('-o', '--out-dir', type=str,
        help='Output directory of the library build (default $OUT_DIR)')
    prefix_parser.add_argument('-p', '--prefix', type=str,
        help='Symbol prefix to use (default BSSL)')
    prefix_parser.add_argument('-m', '--mapping-name', type=str,
        help='Name of the mapping file to write in the output directory')
    prefix_parser.add_argument('--nm', type=str,
        help='nm tool to use (default $NM or ${CROSS_COMPILE}nm)')
    prefix_parser.add_argument('--objcopy', type=str,
        help='objcopy tool to use (default $OBJCOPY or '
             '${CROSS_COMPILE}objcopy)')
    prefix_parser.add_argument('--verify', action='store_true',
        help='Check that no original symbols remain after prefixing')

    bind_parser = subparser.add_parser('bindings',
        help='Generate a header which links against the prefixed symbols')
    bind_parser.add_argument('-o', '--output', type=str, required=True,
        help='Header file to write')
    bind_parser.add_argument('-i', '--include-dir', type=str, default='',
        help='Include directory containing the header files')
    bind_parser.add_argument('-p', '--prefix', type=str,
        help='Symbol prefix to use (default BSSL)')
    bind_parser.add_argument('--style', choices=STYLES, default='rename',
        help='Output style (default rename)')
    bind_parser.add_argument('headers', nargs='+',
        help='Headers to scan, relative to the include directory')

    map_parser = subparser.add_parser('mapping', help='Show a mapping file')
    map_parser.add_argument('fname', type=str, help='Mapping file to show')

    name_parser = subparser.add_parser('name',
        help='Show the prefixed form of symbol names')
    name_parser.add_argument('-p', '--prefix', type=str,
        help='Symbol prefix to use (default BSSL)')
    name_parser.add_argument('names', nargs='+', help='Symbol names')

    test_parser = subparser.add_parser('test', help='Run tests')
    test_parser.add_argument('-P', '--processes', type=int,
        help='set number of processes to use for running tests')
    test_parser.add_argument('tests', nargs='*',
                             help='Test names to run (omit for all)')

    return parser.parse_args(argv)
