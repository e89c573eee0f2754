"""
Source lexer for script modules.

A Lark lexer splits a script into code, string and comment tokens. The masked
copy it produces keeps every character offset and every newline of the
original, but hides the inside of strings and comments so that a require()
written there is never mistaken for a dependency.

Known limits: regular expression literals are not recognised (a quote or
`//` inside one can shift string/comment boundaries), and `${...}`
expressions inside template literals are masked together with the template.
"""

from lark import Lark


MASK_CHAR = "-"

source_grammar = r"""
    start: (CODE | SLASH | LINE_COMMENT | BLOCK_COMMENT | DQ_STRING | SQ_STRING | TEMPLATE | STRAY_QUOTE)*

    LINE_COMMENT: /\/\/[^\n]*/
    BLOCK_COMMENT: /\/\*[\s\S]*?\*\//
    DQ_STRING: /"(?:[^"\\\n]|\\[\s\S])*"/
    SQ_STRING: /'(?:[^'\\\n]|\\[\s\S])*'/
    TEMPLATE: /`(?:[^`\\]|\\[\s\S])*`/

    // Anything that cannot start a string or a comment
    CODE: /[^"'`\/]+/
    SLASH: "/"

    // Unterminated quote, e.g. inside a regex literal
    STRAY_QUOTE: /["'`]/
"""

# Number of delimiter characters kept on each side of a masked token
_DELIMITERS = {
    "LINE_COMMENT": (2, 0),
    "BLOCK_COMMENT": (2, 2),
    "DQ_STRING": (1, 1),
    "SQ_STRING": (1, 1),
    "TEMPLATE": (1, 1),
}

_lexer = None


def get_lexer():
    """Build the Lark lexer once and reuse it."""
    global _lexer
    if _lexer is None:
        _lexer = Lark(source_grammar, parser='lalr', lexer='basic')
    return _lexer


def tokenize(text):
    """Yield the Lark tokens of a script."""
    return get_lexer().lex(text)


def _blank(text):
    return "".join(c if c == "\n" else MASK_CHAR for c in text)


def mask_source(text):
    """
    Hide the inside of every string and comment in a script.

    Args:
        text: Script source.

    Returns:
        A string of the same length where string and comment interiors are
        replaced with MASK_CHAR. Quotes, comment delimiters and newlines are
        kept, so offsets and line numbers stay valid.
    """
    parts = []
    for token in tokenize(text):
        value = str(token)
        if token.type not in _DELIMITERS:
            parts.append(value)
            continue
        head, tail = _DELIMITERS[token.type]
        end = len(value) - tail
        parts.append(value[:head] + _blank(value[head:end]) + value[end:])
    return "".join(parts)
