"""
Module record: one resolved source file of the bundle.
"""
import os


class ModuleRecord:
    """
    A source file found by the resolver.

    Identity is the absolute path. `content` holds the raw bytes as read and
    is replaced by the rewritten text once the processor has run.
    """

    def __init__(self, path, content):
        self.path = path
        self.directory = os.path.dirname(path)
        self.name, self.ext = os.path.splitext(os.path.basename(path))
        self.content = content
        self.processed = False

    def __repr__(self):
        return f"ModuleRecord({self.path!r})"
