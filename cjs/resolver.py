"""
Module resolution.

Turns a require() specifier plus the directory of the requiring file into an
absolute file path, following the Node.js lookup order: relative and absolute
paths are probed as a file and then as a directory, bare names are looked up
in every node_modules directory from the requiring file outwards.

Probing is an ordered list of candidate paths, tried lazily until one of them
can be read.
"""
import json
import os

from cjs.errors import ModuleNotFound
from cjs.log import debug_log
from cjs.record import ModuleRecord


EXTENSIONS = ('.js', '.json', '.node')
DEPENDENCY_DIR = 'node_modules'
MANIFEST = 'package.json'

# Node.js core modules. They are never bundled; the name only makes the
# error message more helpful.
CORE_MODULES = frozenset((
    'assert buffer child_process cluster console crypto dns domain'
    ' events fs http https net os path punycode readline repl stream'
    ' string_decoder tls dgram url util v8 vm zlib').split())


def read_file(path):
    """
    Read a file for probing.

    Returns:
        The file contents, or None when nothing readable as a file exists at
        `path`. Other OS errors (permissions, I/O) propagate.
    """
    try:
        with open(path, 'rb') as f:
            return f.read()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None


def is_relative(specifier):
    return specifier in ('.', '..') or specifier.startswith(('./', '../'))


def file_candidates(path):
    """The exact name first, then each known extension appended."""
    yield path
    for ext in EXTENSIONS:
        yield path + ext


def manifest_main(directory):
    """Return the `main` field of a directory's package.json, if any."""
    content = read_file(os.path.join(directory, MANIFEST))
    if content is None:
        return None
    try:
        main = json.loads(content).get('main')
    except (ValueError, AttributeError) as e:
        debug_log(f"Ignoring malformed {MANIFEST} in {directory}: {e}")
        return None
    return main if isinstance(main, str) and main else None


def directory_candidates(path):
    """The manifest entry point (as a file), then index files."""
    main = manifest_main(path)
    if main is not None:
        yield from file_candidates(os.path.normpath(os.path.join(path, main)))
    for ext in EXTENSIONS:
        yield os.path.join(path, 'index' + ext)


def path_candidates(path):
    yield from file_candidates(path)
    yield from directory_candidates(path)


def dependency_dirs(origin_dir):
    """
    All node_modules directories visible from `origin_dir`, nearest first.

    Ancestors that are themselves node_modules directories are skipped.
    """
    parts = origin_dir.rstrip(os.sep).split(os.sep)
    for i in range(len(parts), 0, -1):
        if parts[i - 1] == DEPENDENCY_DIR:
            continue
        yield os.sep.join(parts[:i] + [DEPENDENCY_DIR])


def candidates(specifier, origin_dir):
    """Every path the specifier may refer to, in lookup order."""
    if is_relative(specifier):
        yield from path_candidates(os.path.normpath(os.path.join(origin_dir, specifier)))
    elif os.path.isabs(specifier):
        yield from path_candidates(os.path.normpath(specifier))
    else:
        for directory in dependency_dirs(origin_dir):
            yield from path_candidates(os.path.join(directory, specifier))


def locate(specifier, origin_dir):
    """
    Find the module a specifier refers to and read it.

    Args:
        specifier: The require() argument.
        origin_dir: Directory of the requiring file.

    Returns:
        A ModuleRecord for the first candidate that could be read.

    Raises:
        ModuleNotFound: If no candidate exists.
    """
    for path in candidates(specifier, origin_dir):
        content = read_file(path)
        if content is not None:
            path = os.path.abspath(path)
            debug_log(f"Resolved '{specifier}' from {origin_dir} to {path}")
            return ModuleRecord(path, content)

    message = f"{specifier} module not found"
    if specifier in CORE_MODULES:
        raise ModuleNotFound(
            f"{message} ({specifier} is a Node.js core module)",
            suggestion="Core modules are not bundled; install a browser "
                       "emulation into node_modules instead")
    raise ModuleNotFound(message)


def resolve(specifier, origin_dir):
    """Resolve a specifier to the absolute path of the module file."""
    return locate(specifier, origin_dir).path
