# SPDX-License-Identifier: GPL-2.0+
"""Generate bindings which link against the prefixed symbols

The generator scans the library's public headers for externally linked
declarations and asks a naming callback for the link name of each one. Two
output styles are supported:

rename: an API header which includes the original headers and then declares
    each function or variable again under its link name, e.g.
        OPENSSL_EXPORT SSL *BSSL_SSL_new(SSL_CTX *ctx);

define: a prefix header to be included before the library headers, which
    redirects every use of the original name, e.g.
        #define SSL_new BSSL_SSL_new
"""

from dataclasses import dataclass
import os
import re
import sys
from typing import List

from u_boot_pylib import tools
from u_boot_pylib import tout

STYLES = ['rename', 'define']

# Words which take a parenthesised argument but do not declare anything
NOT_DECLARATORS = {
    '__attribute__', '__declspec', '__asm__', '__asm', 'asm', 'alignas',
    '_Alignas', '_Static_assert', 'static_assert', 'sizeof', 'decltype',
    'typeof', '__typeof__',
    }

RE_COMMENT = re.compile(r'/\*.*?\*/|//[^\n]*', re.DOTALL)
RE_EXTERN_C = re.compile(r'extern\s*"C"\s*$')
RE_IDENT_BEFORE = re.compile(r'(\w+)\s*$')
RE_PTR_RETURN = re.compile(r'\s*[*^]\s*(\w+)\s*\(')
RE_TRAILER = re.compile(r'(\s*(\[[^\]]*\]|__attribute__\s*\(\(.*\)\)))+$')

HEADER = '''#ifndef {guard}
#define {guard}

/* Auto-generated by symprefix: do not edit */

'''

FOOTER = '''#endif /* {guard} */
'''


@dataclass
class Decl:
    """An externally linked declaration found in a header

    Properties:
        name (str): Declared name
        text (str): Declaration, on one line without the trailing semicolon
        pos (int): Offset of the name within text
        is_func (bool): True for a function, False for a variable
    """
    name: str
    text: str
    pos: int
    is_func: bool

    def renamed(self, new_name):
        """Get the declaration with the name changed

        Args:
            new_name (str): Name to use

        Returns:
            str: Declaration, including the semicolon
        """
        end = self.pos + len(self.name)
        return f'{self.text[:self.pos]}{new_name}{self.text[end:]};'


def strip_preprocessor(text):
    """Remove preprocessor lines, including continuation lines"""
    out = []
    in_directive = False
    for line in text.splitlines():
        if in_directive or line.lstrip().startswith('#'):
            in_directive = line.endswith('\\')
            continue
        out.append(line)
    return '\n'.join(out)


def split_statements(text):
    """Split C source into top-level statements

    Anything inside braces belongs to the enclosing statement, except for
    extern "C" blocks whose contents are at file scope. Function definitions
    (such as static inline functions) are dropped.

    Args:
        text (str): Source with comments and preprocessor lines removed

    Returns:
        List[str]: Statements without their trailing semicolon
    """
    stmts = []
    cur = []
    depth = 0
    head = ''

    # One entry per open brace: True for a real block, False for extern "C"
    stack = []
    for char in text:
        if char == '{':
            if not depth and RE_EXTERN_C.search(''.join(cur)):
                stack.append(False)
                cur = []
                continue
            if not depth:
                head = ''.join(cur)
            stack.append(True)
            depth += 1
            cur.append(char)
        elif char == '}':
            if not stack:
                continue
            if not stack.pop():
                cur = []
                continue
            depth -= 1
            cur.append(char)
            if not depth and '(' in head:
                cur = []
        elif char == ';' and not depth:
            stmts.append(''.join(cur))
            cur = []
        else:
            cur.append(char)
    return stmts


def paren_groups(text):
    """Find the top-level parenthesised groups in a statement

    Args:
        text (str): Statement to search

    Returns:
        List[tuple[int, int]]: (start, end) of each group, where text[start]
            is '(' and text[end] is the matching ')'
    """
    groups = []
    depth = 0
    start = None
    for upto, char in enumerate(text):
        if char == '(':
            if not depth:
                start = upto
            depth += 1
        elif char == ')' and depth:
            depth -= 1
            if not depth:
                groups.append((start, upto))
    return groups


def func_decl(text, begin, pos, name):
    """Create a function declaration from the part of text after begin

    Args:
        text (str): Statement, normalised to single spaces
        begin (int): Offset where the declaration starts
        pos (int): Offset of the function name in text
        name (str): Function name

    Returns:
        Decl: Declaration
    """
    decl = text[begin:]
    offset = len(decl) - len(decl.lstrip())
    return Decl(name, decl.strip(), pos - begin - offset, True)


def parse_decl(stmt):
    """Parse a top-level statement to see if it declares a symbol

    Args:
        stmt (str): Statement to parse

    Returns:
        Decl or None: Declaration found, or None if the statement does not
            declare a function or extern variable
    """
    text = ' '.join(stmt.split())
    words = text.split(' ')
    if not text or '{' in text or words[0] in ('typedef', 'static', 'using'):
        return None

    # The declaration starts after any macro invocations which precede it
    begin = 0
    for start, end in paren_groups(text):
        inner = text[start + 1:end]
        if inner.lstrip().startswith(('*', '^')):
            # void (*get_cb(const SSL *ssl))(int) returns a function pointer
            mat = RE_PTR_RETURN.match(inner)
            if not mat:
                return None
            return func_decl(text, begin, start + 1 + mat.start(1),
                             mat.group(1))
        mat = RE_IDENT_BEFORE.search(text[begin:start])
        if not mat or mat.group(1) in NOT_DECLARATORS:
            continue
        pos = begin + mat.start(1)
        if not text[begin:pos].strip():
            # A macro invocation such as DEFINE_STACK_OF(X509)
            begin = end + 1
            continue
        return func_decl(text, begin, pos, mat.group(1))

    decl = text[begin:].strip()
    if 'extern' not in decl.split():
        return None
    mat = RE_IDENT_BEFORE.search(RE_TRAILER.sub('', decl))
    if not mat:
        return None
    return Decl(mat.group(1), decl, mat.start(1), False)


class DeclScanner:
    """Finds the externally linked declarations in a header file

    Expects fairly regular C: declarations end with a semicolon at file scope
    and macros which expand to declarations are not understood.

    Properties:
        fname (str): Path to the header file
    """
    def __init__(self, fname):
        self.fname = fname

    def scan(self) -> List[Decl]:
        """Scan the header

        Returns:
            List[Decl]: Declarations found, in the order they appear
        """
        text = tools.read_file(self.fname, binary=False)
        text = strip_preprocessor(RE_COMMENT.sub(' ', text))
        decls = []
        for stmt in split_statements(text):
            decl = parse_decl(stmt)
            if decl:
                decls.append(decl)
        return decls


class BindingGenerator:
    """Generates a header which binds to the prefixed symbols

    The naming callback is called once for each declaration found. It returns
    the link name to use, or None to leave that declaration out.

    Properties:
        headers (List[str]): Headers to process, relative to include_dir
        include_dir (str): Directory containing the headers
        link_name_cb (callable): Naming callback, taking the declared name
        style (str): Output style, one of STYLES
        missing_hdrs (List[str]): Headers which could not be found
        seen (set of str): Names already passed to the naming callback
        count (int): Number of declarations written so far
    """
    def __init__(self, headers, link_name_cb, style='rename',
                 include_dir=''):
        if style not in STYLES:
            raise ValueError(f"Unknown binding style '{style}'")
        self.headers = headers
        self.include_dir = include_dir
        self.link_name_cb = link_name_cb
        self.style = style
        self.missing_hdrs = []
        self.seen = set()
        self.count = 0

    def process_header(self, hdr):
        """Process a single header file

        Args:
            hdr (str): Header file name

        Returns:
            List[str]: Lines for this header section, or None if the header
                has no declarations to bind
        """
        path = os.path.join(self.include_dir, hdr)
        if not os.path.exists(path):
            self.missing_hdrs.append(hdr)
            return None

        lines = []
        for decl in DeclScanner(path).scan():
            if decl.name in self.seen:
                continue
            self.seen.add(decl.name)
            link_name = self.link_name_cb(decl.name)
            if not link_name:
                continue
            if self.style == 'define':
                lines.append(f'#define {decl.name} {link_name}')
            else:
                lines.append(decl.renamed(link_name))
        self.count += len(lines)
        tout.detail(f'{hdr}: {len(lines)} declarations')
        if not lines:
            return None
        return [f'/* From {hdr} */'] + lines + ['']

    def generate(self, outfile):
        """Generate the header file

        Args:
            outfile (str): Path where to write the new header file

        Returns:
            int: 0 on success, 1 on error
        """
        out = []
        included = []
        for hdr in self.headers:
            lines = self.process_header(hdr)
            if lines:
                out.extend(lines)
                included.append(hdr)

        if self.missing_hdrs:
            print('Missing header files:', file=sys.stderr)
            for hdr in self.missing_hdrs:
                print(f'  - {hdr}', file=sys.stderr)
            return 1

        if not out:
            tout.warning('No declarations found')
            return 0

        guard = re.sub(r'\W', '_', os.path.basename(outfile)).upper()
        head = HEADER.format(guard=guard)
        if self.style == 'rename':
            head += ''.join(f'#include <{hdr}>\n' for hdr in included) + '\n'
        content = head + '\n'.join(out) + '\n' + FOOTER.format(guard=guard)
        tools.write_file(outfile, content, binary=False)
        tout.info(f'Generated bindings: {outfile} ({self.count} '
                  f'declarations)')
        return 0
