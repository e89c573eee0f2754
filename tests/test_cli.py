"""
Tests for the cjsbundle command line.
"""
import os
import sys
import tempfile

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from cjsbundle import main, parse_options


@pytest.fixture
def project(monkeypatch):
    with tempfile.TemporaryDirectory() as d:
        root = os.path.realpath(d)
        with open(os.path.join(root, 'main.js'), 'w') as f:
            f.write("var a = require('./a');\n")
        with open(os.path.join(root, 'a.js'), 'w') as f:
            f.write("exports.a = 1;\n")
        monkeypatch.chdir(root)
        yield root


class TestParseOptions:
    """Tests for argument parsing."""

    def test_flags(self, project):
        options = parse_options(['main.js', '-H', 'node', '-c', '-o', 'out.js'])
        assert options.entry == 'main.js'
        assert options.cwd == project
        assert options.handler == 'node'
        assert options.compress is True
        assert options.output == 'out.js'

    def test_watch_without_output(self, project, capsys):
        with pytest.raises(SystemExit) as exc:
            parse_options(['main.js', '-w'])
        assert exc.value.code == 2
        assert 'output' in capsys.readouterr().err


class TestMain:
    """Tests for one-shot runs."""

    def test_prints_bundle(self, project, capsys):
        main(['main.js'])
        out = capsys.readouterr().out
        assert "'main': function(exports, require, module) {" in out
        assert "var a = require('a');" in out

    def test_writes_output(self, project, capsys):
        main(['main.js', '-o', 'out.js'])
        captured = capsys.readouterr()
        assert captured.out == ''
        assert 'bytes written to out.js' in captured.err
        assert os.path.exists(os.path.join(project, 'out.js'))

    def test_missing_module_exits(self, project, capsys):
        with open(os.path.join(project, 'main.js'), 'w') as f:
            f.write("require('./nope');\n")
        with pytest.raises(SystemExit) as exc:
            main(['main.js'])
        assert exc.value.code == 1
        err = capsys.readouterr().err
        assert err.startswith('ModuleNotFound: ./nope module not found')
