# SPDX-License-Identifier: GPL-2.0+
"""Parse nm output and build the symbol-rename mapping"""

from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple

from symprefix.naming import SYMBOL_PREFIX, prefixed_name


class SymbolKind(Enum):
    """nm type markers for symbols which are visible outside their object"""
    TEXT = 'T'
    INIT_DATA = 'D'
    UNINIT_DATA = 'B'
    CONST = 'C'         # common symbol
    RODATA = 'R'
    WEAK = 'W'
    OTHER = '?'


# Markers we rename, in the order they are checked against each line
GLOBAL_KINDS = [kind for kind in SymbolKind if kind != SymbolKind.OTHER]


@dataclass
class Symbol:
    """A global symbol listed by nm"""
    name: str
    kind: SymbolKind


class Rename(NamedTuple):
    """One line of the mapping passed to objcopy --redefine-syms"""
    orig: str
    new_name: str


def line_kind(line):
    """Work out the kind of a global symbol from a line of nm output

    Args:
        line (str): Line to check, e.g. '0000000000000000 T SSL_new'

    Returns:
        SymbolKind: Kind of the symbol, or None if the line does not show a
            global symbol
    """
    for kind in GLOBAL_KINDS:
        if f' {kind.value} ' in line:
            return kind
    return None


def parse_symbols(text):
    """Parse the output of nm into a list of global symbols

    Lines for local symbols (lower-case markers), debug symbols and undefined
    references are dropped, as are archive-member headers and blank lines.

    Args:
        text (str): Output from nm

    Returns:
        List[Symbol]: Global symbols, in the order nm listed them
    """
    syms = []
    for line in text.splitlines():
        kind = line_kind(line)
        if not kind:
            continue

        # Columns are: address, type marker, name
        fields = line.split()
        if len(fields) < 3:
            continue
        syms.append(Symbol(fields[2], kind))
    return syms


def public_names(syms: List[Symbol]) -> List[str]:
    """Get the names of symbols which form part of the library's API

    Names with a leading underscore are compiler or ABI internals and are left
    alone.

    Args:
        syms (List[Symbol]): Symbols to check

    Returns:
        List[str]: Names to rename, possibly with duplicates
    """
    return [sym.name for sym in syms if not sym.name.startswith('_')]


def build_mapping(names: List[str], prefix=SYMBOL_PREFIX) -> List[Rename]:
    """Build the sorted, de-duplicated mapping from each name to its new name

    A symbol can be listed many times when it appears in several archives or
    is referenced by several members. The result is sorted so that the same
    input always produces the same mapping file.

    Args:
        names (List[str]): Symbol names to rename
        prefix (str): Prefix to apply

    Returns:
        List[Rename]: Mapping, sorted by original name
    """
    return [Rename(name, prefixed_name(name, prefix))
            for name in sorted(set(names))]
