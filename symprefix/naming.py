# SPDX-License-Identifier: GPL-2.0+
"""Symbol-prefix rule shared by the archive rewrite and the bindings

Both the objcopy mapping and the generated bindings call prefixed_name(), so
the two can never disagree about what a symbol is called, even when they run
in separate processes.
"""

# Prefix applied to all BoringSSL symbols so they don't collide with OpenSSL
SYMBOL_PREFIX = 'BSSL'


def prefixed_name(name, prefix=SYMBOL_PREFIX):
    """Get the prefixed form of a symbol name

    Args:
        name (str): Original symbol name, e.g. 'SSL_new'
        prefix (str): Prefix to apply

    Returns:
        str: Prefixed name, e.g. 'BSSL_SSL_new'
    """
    return f'{prefix}_{name}'


def link_name_override(name, prefix=SYMBOL_PREFIX):
    """Binding-generator callback giving the link name for a declaration

    C symbol 'SSL_new' is bound as 'BSSL_SSL_new'.

    Args:
        name (str): Declared name found in the public headers
        prefix (str): Prefix to apply

    Returns:
        str: Name that the generated binding links against
    """
    return prefixed_name(name, prefix)


class SymbolPrefixCallbacks:
    """Naming hook for a binding generator, with the prefix fixed

    Properties:
        prefix (str): Prefix applied to every declaration
    """
    def __init__(self, prefix=SYMBOL_PREFIX):
        self.prefix = prefix

    def __call__(self, name):
        return link_name_override(name, self.prefix)

    def __repr__(self):
        return f'SymbolPrefixCallbacks({self.prefix!r})'
