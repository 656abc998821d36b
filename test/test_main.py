# SPDX-License-Identifier: GPL-2.0+
"""Tests for the symprefix command line"""

import contextlib
from io import StringIO
import os
import tempfile
import unittest

from u_boot_pylib import command
from u_boot_pylib import tools
from u_boot_pylib import tout

from symprefix.__main__ import main


class TestMain(unittest.TestCase):
    """Tests for main()"""

    def setUp(self):
        # pylint: disable=R1732
        self.tmpdir = tempfile.TemporaryDirectory()
        self.out_dir = self.tmpdir.name
        self.cmds = []
        command.TEST_RESULT = self._handle_command

    def tearDown(self):
        command.TEST_RESULT = None
        tout.init(tout.WARNING)
        self.tmpdir.cleanup()

    def _handle_command(self, pipe_list):
        """Pretend to be nm and objcopy"""
        cmd = list(pipe_list[0])
        self.cmds.append(cmd)
        if 'nm' in cmd[0]:
            return command.CommandResult(
                stdout='0000000000000000 T SSL_new\n', return_code=0)
        if 'objcopy' in cmd[0] and cmd[-1].endswith('libcrypto.a'):
            return command.CommandResult(stderr='cannot open',
                                         return_code=1)
        return command.CommandResult(return_code=0)

    def run_main(self, *args):
        """Run main() and capture its output

        Returns:
            tuple: (exit code, stdout text, stderr text)
        """
        stdout = StringIO()
        stderr = StringIO()
        with (contextlib.redirect_stdout(stdout),
              contextlib.redirect_stderr(stderr)):
            ret = main(list(args))
        return ret, stdout.getvalue(), stderr.getvalue()

    def make_lib(self, subdir, name):
        """Create an archive in the output directory"""
        dirname = os.path.join(self.out_dir, subdir)
        os.makedirs(dirname, exist_ok=True)
        tools.write_file(os.path.join(dirname, name), b'!<arch>\n')

    def test_prefix(self):
        """Test the prefix command"""
        self.make_lib('build', 'libssl.a')
        ret, _, stderr = self.run_main('prefix', '-o', self.out_dir,
                                       '--nm', 'nm', '--objcopy', 'objcopy')
        self.assertEqual(0, ret)
        self.assertEqual('', stderr)
        self.assertEqual(['nm', 'objcopy'], [cmd[0] for cmd in self.cmds])
        data = tools.read_file(os.path.join(self.out_dir, 'redefine_syms.txt'))
        self.assertEqual(b'SSL_new BSSL_SSL_new\n', data)

    def test_prefix_nothing_to_do(self):
        """Test that missing archives give a warning but succeed"""
        ret, _, stderr = self.run_main('prefix', '-o', self.out_dir)
        self.assertEqual(0, ret)
        self.assertIn('No libssl.a/libcrypto.a archives found to prefix',
                      stderr)
        self.assertEqual([], self.cmds)

    def test_prefix_quiet(self):
        """Test that verbosity 0 suppresses the warning"""
        ret, _, stderr = self.run_main('-v', '0', 'prefix', '-o',
                                       self.out_dir)
        self.assertEqual(0, ret)
        self.assertEqual('', stderr)

    def test_verbosity_levels(self):
        """Test that -v 2 adds notices to the default warnings"""
        self.make_lib('build', 'libssl.a')
        args = ['prefix', '-o', self.out_dir, '--nm', 'nm',
                '--objcopy', 'objcopy']
        _, stdout, stderr = self.run_main(*args)
        self.assertNotIn('global symbols', stdout + stderr)

        _, stdout, stderr = self.run_main('-v', '2', *args)
        self.assertIn('Found 1 global symbols, 1 to rename', stdout + stderr)

    def test_prefix_failure(self):
        """Test that a tool failure gives an error exit code"""
        self.make_lib('build', 'libssl.a')
        self.make_lib('build', 'libcrypto.a')
        ret, _, stderr = self.run_main('prefix', '-o', self.out_dir,
                                       '--nm', 'nm', '--objcopy', 'objcopy')
        self.assertEqual(1, ret)
        self.assertIn("symprefix: 'objcopy' failed on ", stderr)
        self.assertIn('libcrypto.a with exit code 1: cannot open', stderr)
        self.assertNotIn('Traceback', stderr)

    def test_debug_traceback(self):
        """Test that -D shows a traceback on error"""
        ret, _, stderr = self.run_main(
            '-D', 'mapping', os.path.join(self.out_dir, 'missing.txt'))
        self.assertEqual(1, ret)
        self.assertIn('symprefix: ', stderr)
        self.assertIn('Traceback', stderr)

    def test_mapping(self):
        """Test showing a mapping file"""
        fname = os.path.join(self.out_dir, 'redefine_syms.txt')
        tools.write_file(fname, b'SSL_free BSSL_SSL_free\n'
                         b'SSL_new BSSL_SSL_new\n')
        ret, stdout, _ = self.run_main('mapping', fname)
        self.assertEqual(0, ret)
        self.assertEqual('SSL_free -> BSSL_SSL_free\n'
                         'SSL_new -> BSSL_SSL_new\n\nTotal: 2 symbols\n',
                         stdout)

    def test_name(self):
        """Test showing prefixed names"""
        ret, stdout, _ = self.run_main('name', 'EVP_PKEY_free', 'SSL_new')
        self.assertEqual(0, ret)
        self.assertEqual('BSSL_EVP_PKEY_free\nBSSL_SSL_new\n', stdout)

        ret, stdout, _ = self.run_main('name', '-p', 'S2N', 'SSL_new')
        self.assertEqual('S2N_SSL_new\n', stdout)

    def test_bindings(self):
        """Test generating bindings from the command line"""
        incdir = os.path.join(self.out_dir, 'include')
        os.makedirs(incdir)
        tools.write_file(os.path.join(incdir, 'evp.h'),
                         'int EVP_PKEY_free(void *pkey);\n', binary=False)
        outfile = os.path.join(self.out_dir, 'prefix.h')
        ret, _, _ = self.run_main('bindings', '-i', incdir, '-o', outfile,
                                  '--style', 'define', 'evp.h')
        self.assertEqual(0, ret)
        self.assertIn('#define EVP_PKEY_free BSSL_EVP_PKEY_free\n',
                      tools.read_file(outfile, binary=False))

    def test_bindings_missing(self):
        """Test that a missing header gives an error exit code"""
        ret, _, stderr = self.run_main(
            'bindings', '-i', self.out_dir, '-o',
            os.path.join(self.out_dir, 'api.h'), 'nope.h')
        self.assertEqual(1, ret)
        self.assertIn('Missing header files:', stderr)

    def test_no_command(self):
        """Test that a subcommand is required"""
        with self.assertRaises(SystemExit) as exc:
            self.run_main()
        self.assertEqual(2, exc.exception.code)
