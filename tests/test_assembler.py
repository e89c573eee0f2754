"""
Unit tests for bundle assembly, minification and output.
"""
import os
import sys
import tempfile

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from cjs import assembler
from cjs.assembler import SEPARATOR, assemble, compress, indent, write_bundle
from cjs.errors import CompressionFailure, IOFailure
from cjs.record import ModuleRecord
from cjs.registry import BuildContext


def context_with(*modules):
    """Build a context from (id, content) pairs without touching the disk."""
    context = BuildContext()
    for module_id, content in modules:
        record = ModuleRecord(f'/project/{module_id}.js', b'')
        record.content = content
        record.processed = True
        context.items[module_id] = record
    context.main = modules[0][0]
    return context


class TestIndent:
    def test_blank_lines_stay_empty(self):
        assert indent("a;\n\nb;") == "    a;\n\n    b;"


class TestAssemble:
    """Tests for the bundle text layout."""

    def test_single_module(self):
        """The bundle wraps the table in an immediately invoked loader."""
        bundle = assemble(context_with(('main', 'var a = 1;\n\nvar b = 2;')), 'LOADER')
        assert bundle == (
            "(LOADER(this, 'main', {\n"
            + SEPARATOR
            + "  'main': function(exports, require, module) {\n"
            + "    var a = 1;\n\n    var b = 2;\n"
            + "  }\n"
            + SEPARATOR
            + "}));"
        )

    def test_entries_are_separated(self):
        """Entries are joined by a comma and a separator line."""
        bundle = assemble(context_with(('main', "require('a');"), ('a', 'exports.a = 1;')), 'L')
        assert "  }},\n{0}  'a': function(exports, require, module) {{".format(SEPARATOR) in bundle
        assert bundle.count(SEPARATOR) == 3

    def test_separator_shape(self):
        assert SEPARATOR == '  // ' + '-' * 75 + '\n'

    def test_each_factory_once(self):
        """Every registered module appears exactly once."""
        bundle = assemble(context_with(('main', ''), ('a', ''), ('b', '')), 'L')
        for module_id in ('main', 'a', 'b'):
            assert bundle.count(f"'{module_id}': function(exports, require, module)") == 1


    def test_ids_are_escaped(self):
        """An id holding a quote stays a valid string key."""
        bundle = assemble(context_with(("it's", ''), ('b', '')), 'L')
        assert "(L(this, 'it\\'s', {" in bundle
        assert "  'it\\'s': function(exports, require, module) {" in bundle


class TestCompress:
    """Tests for minification."""

    def test_minifies(self):
        bundle = assemble(context_with(('0', 'var  answer   =   42;\n// comment')), 'function (g, m, t) { }')
        minified = compress(bundle)
        assert len(minified) < len(bundle)
        assert "'0'" in minified
        assert '// comment' not in minified

    def test_failure(self, monkeypatch):
        """A minifier error becomes CompressionFailure."""
        def broken(text):
            raise RuntimeError("boom")
        monkeypatch.setattr(assembler.rjsmin, 'jsmin', broken)
        with pytest.raises(CompressionFailure) as exc:
            compress('x')
        assert 'boom' in str(exc.value)


class TestWriteBundle:
    """Tests for persisting the bundle."""

    def test_writes_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'out.js')
            write_bundle('(x);', path)
            with open(path) as f:
                assert f.read() == '(x);'

    def test_unwritable_target(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'missing', 'out.js')
            with pytest.raises(IOFailure) as exc:
                write_bundle('(x);', path)
            assert exc.value.path == path
