"""
Module content processing.

Turns the raw bytes of a module into the text of its factory body: JSON
files become an export statement, scripts get every require() argument
replaced with the id of the module it resolves to.
"""
import re

from cjs.errors import BundleError, UnsupportedModuleType
from cjs.lexer import mask_source


NATIVE_EXT = '.node'
DATA_EXT = '.json'

# Matched against masked text, where a string interior never holds a quote
IMPORT_RE = re.compile(r'(?<![\w$])require\s*\(\s*(["\'])([^"\'\n]*)\1\s*\)')
TRAILING_WS_RE = re.compile(r'[ \t]+(?=\n)')


class ImportCall:
    """One require("...") call found in a script."""

    def __init__(self, text, specifier, quote, start, end, line, column):
        self.text = text
        self.specifier = specifier
        self.quote = quote
        self.start = start  # Offsets of the specifier inside the quotes
        self.end = end
        self.line = line
        self.column = column

    def __repr__(self):
        return f"ImportCall({self.specifier!r}, line={self.line}, column={self.column})"


class Source:
    """
    Normalised module text.

    Carriage returns are dropped, trailing spaces are removed from every line
    and the text is trimmed. The number of lines and columns removed from the
    front is kept so that locations still match the file on disk.
    """

    def __init__(self, raw):
        text = raw.decode('utf-8-sig', errors='replace') if isinstance(raw, bytes) else raw
        text = TRAILING_WS_RE.sub('', text.replace('\r', ''))
        body = text.lstrip()
        lead = text[:len(text) - len(body)]
        self.text = body.rstrip()
        self.line_offset = lead.count('\n')
        self.column_offset = len(lead) - (lead.rfind('\n') + 1)

    def location(self, offset, masked):
        """1-based (line, column) of an offset, relative to the original file."""
        line = masked.count('\n', 0, offset)
        column = offset - (masked.rfind('\n', 0, offset) + 1)
        if line == 0:
            column += self.column_offset
        return line + 1 + self.line_offset, column + 1


def scan_imports(source):
    """
    Find the require() calls of a script.

    The search runs over the masked copy of the text, so calls that only
    appear inside strings or comments are skipped. Specifiers are read back
    from the unmasked text at the same offsets.

    Args:
        source: A Source instance.

    Returns:
        List of ImportCall, in source order.
    """
    text = source.text
    masked = mask_source(text)
    calls = []
    for match in IMPORT_RE.finditer(masked):
        line, column = source.location(match.start(), masked)
        calls.append(ImportCall(
            text=text[match.start():match.end()],
            specifier=text[match.start(2):match.end(2)],
            quote=match.group(1),
            start=match.start(2),
            end=match.end(2),
            line=line,
            column=column,
        ))
    return calls


def escape_id(module_id, quote="'"):
    """Escape a module id for use inside a string literal with `quote`."""
    return module_id.replace('\\', '\\\\').replace(quote, '\\' + quote)


def rewrite(text, replacements):
    """Replace (start, end, new_text) spans; spans must not overlap."""
    parts = []
    last = 0
    for start, end, new_text in sorted(replacements):
        parts.append(text[last:start])
        parts.append(new_text)
        last = end
    parts.append(text[last:])
    return "".join(parts)


def process_script(record):
    """
    Rewrite the require() calls of a script.

    This is a generator: for every call it yields `(specifier, directory)`
    and expects the module id to be sent back. A BundleError thrown in at
    that point gets the call's location added and is re-raised.

    Returns:
        The rewritten script text.
    """
    source = Source(record.content)
    replacements = []
    for call in scan_imports(source):
        try:
            module_id = yield call.specifier, record.directory
        except BundleError as e:
            e.add_location(call.text, record.path, call.line, call.column)
            raise
        replacements.append((call.start, call.end, escape_id(module_id, call.quote)))
    return rewrite(source.text, replacements)


def process(record):
    """
    Rewrite a module's content in place.

    Like process_script(), a generator that yields one `(specifier,
    directory)` request per import and receives the resolved id back.
    Nothing is yielded for JSON modules.

    Args:
        record: The ModuleRecord to process; `record.content` holds bytes.

    Raises:
        UnsupportedModuleType: For compiled Node.js addons.
        BundleError: A failed import thrown back in, with the location of
            its require() call added.
    """
    if record.processed:
        return
    if record.ext == NATIVE_EXT:
        raise UnsupportedModuleType(
            f"{record.name} is a Node.js compiled addon module ({record.path})")

    if record.ext == DATA_EXT:
        record.content = f"module.exports = {Source(record.content).text};"
    else:
        record.content = yield from process_script(record)
    record.processed = True
