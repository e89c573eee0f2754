"""
Bundle assembly.

Serialises a populated BuildContext into the bundle text:

    (<loader>(this, '<main>', {
      '<id>': function(exports, require, module) {
        <body>
      },
      ...
    }));
"""
import rjsmin

from cjs.errors import CompressionFailure, IOFailure
from cjs.processor import escape_id


GLOBAL_REF = "this"
INDENT = "    "
SEPARATOR = f"  // {'-' * 75}\n"


def indent(content):
    """Indent every non-empty line of a factory body."""
    return "\n".join(INDENT + line if line else line for line in content.split("\n"))


def factory(module_id, content):
    return f"  '{escape_id(module_id)}': function(exports, require, module) {{\n{indent(content)}\n  }}"


def assemble(context, loader_source):
    """
    Build the bundle text.

    Args:
        context: A BuildContext whose modules have all been processed.
        loader_source: Function expression of the runtime loader.

    Returns:
        The bundle source.
    """
    entries = [factory(module_id, record.content) for module_id, record in context.items.items()]
    source = (",\n" + SEPARATOR).join(entries)
    return f"({loader_source}({GLOBAL_REF}, '{escape_id(context.main)}', {{\n{SEPARATOR}{source}\n{SEPARATOR}}}));"


def compress(bundle):
    """Minify the bundle; any minifier failure is a CompressionFailure."""
    try:
        return rjsmin.jsmin(bundle)
    except Exception as e:
        raise CompressionFailure(f"Minifier failed: {e}") from e


def write_bundle(bundle, output):
    """Write the bundle to `output`, raising IOFailure on any OS error."""
    try:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(bundle)
    except OSError as e:
        raise IOFailure(f"Cannot write {output}: {e.strerror or e}", path=output) from e
