# SPDX-License-Identifier: GPL-2.0+
"""Run nm and objcopy over the static archives

The tools do the real work of reading and editing the object-file format. We
only decide which archives to pass them and check that they succeeded.
"""

import os

from u_boot_pylib import command
from u_boot_pylib import tools
from u_boot_pylib import tout


class ToolError(ValueError):
    """An external tool could not be run, or reported failure

    Properties:
        tool (str): Name of the tool, e.g. 'objcopy'
        result (command.CommandResult): Result of running it, or None
    """
    def __init__(self, msg, tool, result=None):
        super().__init__(msg)
        self.tool = tool
        self.result = result


def find_archives(cfg):
    """Find the static archives which need prefixing

    Each archive name is tried in each library directory, so the result is in
    a fixed order for a given configuration.

    Args:
        cfg (Config): Configuration to use

    Returns:
        List[str]: Paths of archives which exist
    """
    found = []
    for subdir in cfg.lib_dirs:
        for name in cfg.lib_names:
            path = os.path.join(cfg.out_dir, subdir, name)
            if os.path.exists(path):
                found.append(path)
            else:
                tout.debug(f"No archive at '{path}'")
    return found


def get_tool(name, override=None):
    """Get the command to use for a binutils tool

    Args:
        name (str): Tool name, e.g. 'nm'
        override (str or None): Tool selected by the configuration, or None
            to use $NM / $OBJCOPY / $CROSS_COMPILE as usual

    Returns:
        List[str]: Tool followed by any extra arguments it needs
    """
    if override:
        return override.split()
    tool, args = tools.get_target_compile_tool(name)
    return [tool] + args


def run_tool(cmd, *args, what):
    """Run a tool, failing if it cannot be started or returns an error

    Args:
        cmd (List[str]): Tool to run along with any extra arguments
        args (List[str]): Arguments to pass
        what (str): Files the tool is working on, for error messages

    Returns:
        command.CommandResult: Result from the tool

    Raises:
        ToolError: The tool failed
    """
    tool = cmd[0]
    tout.detail(f"Running: {' '.join(cmd + list(args))}")
    result = command.run_one(*cmd, *args, capture=True, capture_stderr=True,
                             raise_on_error=False)
    if result.exception:
        raise ToolError(f"Cannot run '{tool}' on {what}: {result.exception}",
                        tool, result)
    if result.return_code:
        stderr = (result.stderr or '').strip()
        raise ToolError(f"'{tool}' failed on {what} with exit code "
                        f'{result.return_code}: {stderr}', tool, result)
    return result


def list_symbols(archives, nm=None):
    """Use nm to list the symbols in a set of archives

    Args:
        archives (List[str]): Archives to list, must not be empty
        nm (str or None): nm tool to use, None for the default

    Returns:
        str: Output from nm
    """
    cmd = get_tool('nm', nm)
    result = run_tool(cmd, *archives, what=', '.join(archives))
    return result.stdout


def redefine_syms(archive, mapping_fname, objcopy=None):
    """Use objcopy to rename symbols in an archive, in place

    Args:
        archive (str): Archive to update
        mapping_fname (str): Mapping file, as written by write_mapping()
        objcopy (str or None): objcopy tool to use, None for the default
    """
    cmd = get_tool('objcopy', objcopy)
    run_tool(cmd, f'--redefine-syms={mapping_fname}', archive, what=archive)
    tout.info(f'Prefixed symbols in {archive}')
