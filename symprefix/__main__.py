#!/usr/bin/env python3
# SPDX-License-Identifier: GPL-2.0+

"""Symprefix - add a prefix to the global symbols in static archives"""

import os
import sys
import traceback

from u_boot_pylib import test_util
from u_boot_pylib import tout

from symprefix import cmdline
from symprefix import control
from symprefix.config import Config, get_prefix


def run_tests(processes, test_name):  # pragma: no cover
    """Run all the tests we have for symprefix

    Args:
        processes (int): Number of processes to use to run tests
        test_name (str): Name of specific test to run, or None to run all tests

    Returns:
        int: 0 if successful, 1 if not
    """
    # pylint: disable=import-outside-toplevel,import-error
    test_dir = os.path.join(os.path.dirname(__file__), '..', 'test')
    sys.path.insert(0, test_dir)

    import test_archive
    import test_bindings
    import test_config
    import test_control
    import test_main
    import test_mapping
    import test_symbols

    sys.argv = [sys.argv[0]]

    result = test_util.run_test_suites(
        toolname='symprefix', debug=True, verbosity=2, no_capture=False,
        test_preserve_dirs=False, processes=processes, test_name=test_name,
        toolpath=[],
        class_and_module_list=[
            test_symbols.TestSymbols, test_symbols.TestNaming,
            test_mapping.TestMapping,
            test_archive.TestArchive, test_config.TestConfig,
            test_control.TestControl, test_bindings.TestBindings,
            test_main.TestMain])

    return 0 if result.wasSuccessful() else 1


def run_symprefix(args):
    """Main entry point to symprefix once arguments are parsed

    Args:
        args (argparse.Namespace): Command line arguments

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    ret_code = 0

    # tout level 0 is FATAL, so -v 1 selects tout.WARNING
    tout.init(tout.ERROR + args.verbosity)
    if args.cmd == 'test':  # pragma: no cover
        test_name = args.tests[0] if args.tests else None
        return run_tests(args.processes, test_name)

    try:
        if args.cmd == 'prefix':
            control.prefix_archives(Config.from_args(args))
        elif args.cmd == 'bindings':
            ret_code = control.generate_bindings(
                args.headers, args.output, get_prefix(args), args.style,
                args.include_dir)
        elif args.cmd == 'mapping':
            control.show_mapping(args.fname)
        elif args.cmd == 'name':
            control.show_names(args.names, get_prefix(args))
    except Exception as exc:
        print(f'symprefix: {exc}', file=sys.stderr)
        if args.debug:
            print(file=sys.stderr)
            traceback.print_exc()
        ret_code = 1
    return ret_code


def main(argv=None):
    """Parse arguments and run symprefix

    Args:
        argv (List[str], optional): Arguments to parse. Uses sys.argv[1:]
            if None.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    if argv is None:
        argv = sys.argv[1:]
    args = cmdline.parse_args(argv)
    return run_symprefix(args)


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
