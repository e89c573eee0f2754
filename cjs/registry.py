"""
Module registry for one build.

The BuildContext maps short ids to module records. It is created per build
(and reset before every watch-triggered rebuild) instead of living in a
module-level global.
"""
import os

from cjs.errors import BundleError
from cjs.log import debug_log
from cjs.options import COMPACT, READABLE
from cjs.processor import process
from cjs.resolver import locate


def to_base36(number):
    """Render a non-negative integer in base 36 (0-9, a-z)."""
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    out = []
    while number:
        number, rest = divmod(number, 36)
        out.append(digits[rest])
    return "".join(reversed(out))


class BuildContext:
    """
    Dependency graph of one build.

    Attributes:
        items: Insertion-ordered mapping of id -> ModuleRecord.
        main: Id of the first registered module (the entry file).
        entry: Absolute path of the entry file.
        policy: Id allocation policy, COMPACT or READABLE.
    """

    def __init__(self, policy=READABLE):
        if policy not in (COMPACT, READABLE):
            raise ValueError(f"Unknown id policy: {policy}")
        self.policy = policy
        self.reset()

    def reset(self):
        """Forget every module so the graph can be rebuilt from scratch."""
        self.items = {}
        self.main = None
        self.entry = None
        self._ids_by_path = {}
        self._next_id = 0

    def __len__(self):
        return len(self.items)

    def __contains__(self, module_id):
        return module_id in self.items

    def paths(self):
        """Absolute paths of every loaded module, in registration order."""
        return [record.path for record in self.items.values()]

    def id_for(self, path):
        return self._ids_by_path.get(path)

    def _allocate_id(self, record, specifier):
        if self.policy == COMPACT:
            module_id = to_base36(self._next_id)
            self._next_id += 1
            return module_id

        if '/' in specifier or os.sep in specifier:
            name = record.name
        else:
            name = specifier
        module_id = name
        n = 1
        while module_id in self.items:
            n += 1
            module_id = f"{name}{n}"
        return module_id

    def register(self, record, specifier):
        """
        Add a module to the graph and process it.

        The record is inserted before its own imports are processed, so a
        require() cycle finds the half-processed entry and stops there.

        Args:
            record: The ModuleRecord returned by the resolver.
            specifier: The require() argument that led to it.

        Returns:
            The module's id (the existing one if the path is already known).
        """
        existing = self._ids_by_path.get(record.path)
        if existing is not None:
            return existing

        module_id = self._insert(record, specifier)
        self._process(record)
        return module_id

    def _insert(self, record, specifier):
        module_id = self._allocate_id(record, specifier)
        if self.main is None:
            self.main = module_id
            self.entry = record.path

        self.items[module_id] = record
        self._ids_by_path[record.path] = module_id
        debug_log(f"Registered '{module_id}' -> {record.path}")
        return module_id

    def _process(self, record):
        """
        Process a record and everything it requires, depth first.

        Each module is processed by a generator that pauses at every
        require() call. The generators are kept on an explicit stack, so the
        length of a require chain is not bounded by the interpreter's
        recursion limit. A failed import is thrown into the requiring
        module's generator, and from there into each importer in turn.
        """
        stack = [(process(record), None)]
        reply = None
        failure = None
        while stack:
            steps, module_id = stack[-1]
            try:
                if failure is not None:
                    error, failure = failure, None
                    request = steps.throw(error)
                else:
                    request = steps.send(reply)
            except StopIteration:
                stack.pop()
                reply = module_id
                continue
            except BundleError as e:
                stack.pop()
                if not stack:
                    raise
                failure = e
                continue

            reply = None
            specifier, origin_dir = request
            try:
                child = locate(specifier, origin_dir)
            except BundleError as e:
                failure = e
                continue
            existing = self._ids_by_path.get(child.path)
            if existing is not None:
                reply = existing
                continue
            stack.append((process(child), self._insert(child, specifier)))

    def load(self, specifier, origin_dir=os.sep):
        """Resolve a specifier and register the module it names."""
        return self.register(locate(specifier, origin_dir), specifier)
