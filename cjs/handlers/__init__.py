# Bundle runtime loaders
"""
Runtime loaders embedded at the top of every bundle.

The built-in loaders are real JavaScript files next to this module so they
can be edited and tested as JavaScript. At build time the function
expression they export is extracted and pasted into the bundle.

A loader must be a function taking (global, mainId, moduleTable). External
loaders given by path are checked for that shape before they are used.
"""

import os
import re

from cjs.errors import HandlerLoadFailure
from cjs.lexer import mask_source


HANDLERS_DIR = os.path.dirname(__file__)
LOADER_PARAMS = 3

_HEADER_RE = re.compile(
    r'(?:module\.exports|exports)\s*=\s*(function\b[\w$\s]*)\(([^)]*)\)\s*\{'
    r'|^(?:\s|//-*|/\*[-\n]*\*/)*(function\b[\w$\s]*)\(([^)]*)\)\s*\{')
_IDENTIFIER_RE = re.compile(r'^[A-Za-z_$][\w$]*$')
_TRAILER_RE = re.compile(r'^(?:\s|;|//-*|/\*[-\n]*\*/)*$')


def available_handlers():
    """Names of the built-in loaders."""
    return sorted(
        name[:-3] for name in os.listdir(HANDLERS_DIR) if name.endswith('.js'))


def is_path(selection):
    return '/' in selection or os.sep in selection


def handler_path(selection, cwd):
    """Map a handler selection (built-in name or file path) to a file."""
    if not is_path(selection):
        if selection not in available_handlers():
            raise HandlerLoadFailure(
                f"Unknown handler '{selection}'",
                suggestion=f"Use one of: {', '.join(available_handlers())}, or a path to a .js file")
        return os.path.join(HANDLERS_DIR, selection + '.js')
    if os.path.isabs(selection):
        return selection
    return os.path.join(cwd, selection)


def _matching_brace(masked, open_pos):
    depth = 0
    for pos in range(open_pos, len(masked)):
        char = masked[pos]
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return pos
    return None


def extract_loader(source, origin='<loader>'):
    """
    Pull the loader function expression out of a loader file.

    Accepts `module.exports = function (global, main, modules) {...};` or a
    bare function expression. The function must take exactly three
    parameters and be the only thing the file defines.

    Returns:
        The function expression source text.

    Raises:
        HandlerLoadFailure: If the source does not have that shape.
    """
    masked = mask_source(source)
    match = _HEADER_RE.search(masked)
    if match is None:
        raise HandlerLoadFailure(
            f"{origin} does not export a loader function",
            suggestion="Write it as: module.exports = function (global, main, modules) { ... };")

    start = match.start(1) if match.group(1) else match.start(3)
    params = match.group(2) if match.group(1) else match.group(4)
    names = [p.strip() for p in params.split(',') if p.strip()]
    if len(names) != LOADER_PARAMS or not all(_IDENTIFIER_RE.match(n) for n in names):
        raise HandlerLoadFailure(
            f"{origin} loader must take {LOADER_PARAMS} parameters "
            f"(global, main, modules), got ({params.strip()})")

    end = _matching_brace(masked, match.end() - 1)
    if end is None:
        raise HandlerLoadFailure(f"{origin} loader function body is not closed")
    if not _TRAILER_RE.match(masked[end + 1:]):
        raise HandlerLoadFailure(f"{origin} has code after the loader function")

    return source[start:end + 1]


def load_handler(selection, cwd):
    """
    Load the loader source for a handler selection.

    Args:
        selection: Built-in handler name, or a path to a loader file.
        cwd: Directory relative paths are resolved against.

    Returns:
        The loader function expression, ready to embed in a bundle.
    """
    path = handler_path(selection, cwd)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            source = f.read()
    except OSError as e:
        raise HandlerLoadFailure(f"Cannot read handler {path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise HandlerLoadFailure(f"Handler {path} is not valid UTF-8: {e.reason}") from e
    return extract_loader(source.replace('\r', ''), origin=path)
