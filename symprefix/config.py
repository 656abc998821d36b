# SPDX-License-Identifier: GPL-2.0+
"""Configuration for symprefix

Settings come from (highest priority first) the command line, a settings
file, the environment and finally the defaults below. A settings file looks
like this:

    [DEFAULT]
    prefix = BSSL
    lib_dirs = build, build/ssl, build/crypto
    lib_names = libssl.a, libcrypto.a
    objcopy = llvm-objcopy
"""

import configparser
from dataclasses import dataclass, field
import os
from typing import List

from symprefix.mapping import MAPPING_NAME
from symprefix.naming import SYMBOL_PREFIX

# Build directories (relative to the output dir) where CMake puts the archives
LIB_DIRS = ['build', 'build/ssl', 'build/crypto']

# Archives to prefix
LIB_NAMES = ['libssl.a', 'libcrypto.a']

# Settings which may appear in a settings file
SETTINGS = ['prefix', 'lib_dirs', 'lib_names', 'nm', 'objcopy']


@dataclass
class Config:
    """Settings for a prefixing run

    Properties:
        out_dir (str): Output directory of the library build
        prefix (str): Prefix to apply to each symbol
        lib_dirs (List[str]): Directories within out_dir to search
        lib_names (List[str]): Archive filenames to look for in each dir
        mapping_name (str): Name of mapping file to write in out_dir
        nm (str): nm tool to use, None to use $NM / $CROSS_COMPILE
        objcopy (str): objcopy tool to use, None to use $OBJCOPY /
            $CROSS_COMPILE
        verify (bool): True to check the archives after rewriting them
    """
    out_dir: str
    prefix: str = SYMBOL_PREFIX
    lib_dirs: List[str] = field(default_factory=lambda: list(LIB_DIRS))
    lib_names: List[str] = field(default_factory=lambda: list(LIB_NAMES))
    mapping_name: str = MAPPING_NAME
    nm: str = None
    objcopy: str = None
    verify: bool = False

    @property
    def mapping_fname(self):
        """Path to the mapping file"""
        return os.path.join(self.out_dir, self.mapping_name)

    @staticmethod
    def from_args(args, env=None):
        """Set up the configuration from command-line arguments

        Args:
            args (argparse.Namespace): Arguments from the 'prefix' command
            env (dict): Environment to use, None for os.environ

        Returns:
            Config: Resulting configuration

        Raises:
            ValueError: No output directory was provided
        """
        if env is None:
            env = os.environ
        settings = read_settings(args.settings) if args.settings else {}

        out_dir = args.out_dir or env.get('OUT_DIR')
        if not out_dir:
            raise ValueError('No output directory: use -o or set OUT_DIR')
        cfg = Config(out_dir)
        cfg.prefix = args.prefix or settings.get('prefix') or cfg.prefix
        if 'lib_dirs' in settings:
            cfg.lib_dirs = split_list(settings['lib_dirs'])
        if 'lib_names' in settings:
            cfg.lib_names = split_list(settings['lib_names'])
        cfg.mapping_name = args.mapping_name or cfg.mapping_name
        cfg.nm = args.nm or settings.get('nm')
        cfg.objcopy = args.objcopy or settings.get('objcopy')
        cfg.verify = args.verify
        return cfg


def get_prefix(args):
    """Get the symbol prefix from the arguments or the settings file

    Args:
        args (argparse.Namespace): Arguments with 'prefix' and 'settings'

    Returns:
        str: Prefix to use
    """
    if args.prefix:
        return args.prefix
    settings = read_settings(args.settings) if args.settings else {}
    return settings.get('prefix') or SYMBOL_PREFIX


def split_list(value):
    """Split a comma-separated setting into a list, dropping empty items"""
    return [item.strip() for item in value.split(',') if item.strip()]


def read_settings(fname):
    """Read settings from a settings file

    Args:
        fname (str): Path to the settings file

    Returns:
        dict: Settings found, keyed by name. This is empty if the file does
            not exist

    Raises:
        ValueError: The file is not valid or has an unknown setting
    """
    settings = configparser.ConfigParser()
    try:
        if not settings.read(fname):
            return {}
    except configparser.Error as exc:
        raise ValueError(f"Cannot read settings file '{fname}': {exc}") \
            from exc
    values = dict(settings['DEFAULT'])
    for name in values:
        if name not in SETTINGS:
            raise ValueError(f"Unknown setting '{name}' in '{fname}'")
    return values
