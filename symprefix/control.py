# SPDX-License-Identifier: GPL-2.0+
"""Handles the main control logic of symprefix

Prefixing is a single pass: list the symbols, build the mapping, write it out
and apply it to each archive. Any failure raises an exception and stops the
build, since a partly renamed set of archives can link but then fail at
runtime.
"""

from u_boot_pylib import tout

from symprefix import archive
from symprefix import mapping
from symprefix import symbols
from symprefix.archive import ToolError
from symprefix.bindings import BindingGenerator
from symprefix.naming import SymbolPrefixCallbacks, prefixed_name


def get_mapping(archives, cfg):
    """List the symbols in a set of archives and work out the new names

    Args:
        archives (List[str]): Archives to read
        cfg (Config): Configuration to use

    Returns:
        List[Rename]: Mapping to apply
    """
    text = archive.list_symbols(archives, cfg.nm)
    syms = symbols.parse_symbols(text)
    names = symbols.public_names(syms)
    renames = symbols.build_mapping(names, cfg.prefix)
    tout.notice(f'Found {len(syms)} global symbols, {len(renames)} to rename')
    return renames


def verify_archives(archives, renames, cfg):
    """Check that no original name is still defined in the archives

    Args:
        archives (List[str]): Archives to check
        renames (List[Rename]): Mapping which was applied
        cfg (Config): Configuration to use

    Raises:
        ToolError: Some symbols were not renamed
    """
    text = archive.list_symbols(archives, cfg.nm)
    remaining = {sym.name for sym in symbols.parse_symbols(text)}
    missed = sorted(remaining & {ren.orig for ren in renames})
    if missed:
        shown = ', '.join(missed[:10])
        more = f' (and {len(missed) - 10} more)' if len(missed) > 10 else ''
        raise ToolError(f'{len(missed)} symbols were not renamed: '
                        f'{shown}{more}', 'objcopy')
    tout.info(f'Verified {len(archives)} archives')


def prefix_archives(cfg):
    """Rewrite the global symbols in the static archives to add a prefix

    Uses nm to list the global symbols and objcopy --redefine-syms to edit
    the archives in place, so they can safely coexist with other
    libssl/libcrypto in the process.

    Args:
        cfg (Config): Configuration to use

    Returns:
        bool: True if archives were rewritten, False if none were found (for
            example because the library is linked dynamically)

    Raises:
        ToolError: nm or objcopy failed
        OSError: The mapping file could not be written
    """
    archives = archive.find_archives(cfg)
    if not archives:
        tout.warning(f"No {'/'.join(cfg.lib_names)} archives found to prefix "
                     f"in '{cfg.out_dir}'")
        return False

    renames = get_mapping(archives, cfg)
    mapping.write_mapping(cfg.mapping_fname, renames)

    # objcopy handles a single file at a time
    for path in archives:
        archive.redefine_syms(path, cfg.mapping_fname, cfg.objcopy)

    if cfg.verify:
        verify_archives(archives, renames, cfg)
    return True


def generate_bindings(headers, outfile, prefix, style, include_dir=''):
    """Generate declarations which link against the prefixed symbols

    Args:
        headers (List[str]): Public headers of the library, relative to
            include_dir
        outfile (str): Header file to write
        prefix (str): Symbol prefix
        style (str): Output style, see BindingGenerator
        include_dir (str): Directory containing the headers

    Returns:
        int: 0 on success, 1 on error
    """
    gen = BindingGenerator(headers, SymbolPrefixCallbacks(prefix), style,
                           include_dir)
    return gen.generate(outfile)


def show_mapping(fname):
    """Show the contents of a mapping file

    Args:
        fname (str): Mapping file to read
    """
    renames = mapping.read_mapping(fname)
    for ren in renames:
        print(f'{ren.orig} -> {ren.new_name}')
    print(f'\nTotal: {len(renames)} symbols')


def show_names(names, prefix):
    """Show the prefixed form of some symbol names

    Args:
        names (List[str]): Names to show
        prefix (str): Symbol prefix
    """
    for name in names:
        print(prefixed_name(name, prefix))
