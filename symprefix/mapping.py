# SPDX-License-Identifier: GPL-2.0+
"""Read and write the mapping file used by objcopy --redefine-syms

Format (one rename per line):
    SSL_new BSSL_SSL_new
    SSL_free BSSL_SSL_free
"""

from typing import List

from u_boot_pylib import tools
from u_boot_pylib import tout

from symprefix.symbols import Rename

# Name of the mapping file written to the output directory
MAPPING_NAME = 'redefine_syms.txt'


def format_mapping(renames: List[Rename]) -> str:
    """Convert a mapping to the text format understood by objcopy

    Args:
        renames (List[Rename]): Mapping to convert

    Returns:
        str: One 'orig new_name' line per rename, each newline-terminated
    """
    return ''.join(f'{ren.orig} {ren.new_name}\n' for ren in renames)


def write_mapping(fname, renames: List[Rename]):
    """Write a mapping file, replacing any existing one

    There is no error handling here: if the file cannot be written the build
    must stop, since objcopy would otherwise see a partial mapping.

    Args:
        fname (str): Path of file to write
        renames (List[Rename]): Mapping to write
    """
    tools.write_file(fname, format_mapping(renames).encode('utf-8'))
    tout.info(f'Wrote {len(renames)} symbol renames to {fname}')


def parse_mapping(text, fname='<mapping>') -> List[Rename]:
    """Parse the contents of a mapping file

    Args:
        text (str): Contents to parse
        fname (str): Filename to use in error messages

    Returns:
        List[Rename]: Mapping, in file order

    Raises:
        ValueError: A line does not have exactly two fields
    """
    renames = []
    for linenum, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) != 2:
            raise ValueError(f"{fname}:{linenum}: Expected 'old new' but got "
                             f"'{line}'")
        renames.append(Rename(*fields))
    return renames


def read_mapping(fname) -> List[Rename]:
    """Read a mapping file written by write_mapping()

    Args:
        fname (str): Path of file to read

    Returns:
        List[Rename]: Mapping, in file order
    """
    data = tools.read_file(fname)
    return parse_mapping(data.decode('utf-8'), fname)
