"""
Error types for the bundler.

Every failure that aborts a build derives from BundleError. Resolution and
content errors collect the chain of import calls that led to them, so the
final message reads from the innermost failure outwards to the entry file.
"""


class BundleError(Exception):
    """Base class for bundle failures, with optional source location and hint."""
    def __init__(self, message, path=None, line=None, column=None, context=None, suggestion=None):
        self.message = message
        self.path = path
        self.line = line
        self.column = column
        self.context = context  # The offending import call text
        self.suggestion = suggestion  # How to fix it
        self.trace = []  # (text, path, line, column), innermost first
        super().__init__(self.message)

    def add_location(self, text, path, line, column):
        """
        Record the import call that led to this error.

        The first recorded location also becomes the error's own location.
        """
        if self.path is None:
            self.path, self.line, self.column, self.context = path, line, column, text
        self.trace.append((text, path, line, column))

    def __str__(self):
        return self._format_error()

    def _format_error(self):
        """Format the message followed by one 'at' line per import call."""
        lines = [self.message]
        for text, path, line, column in self.trace:
            lines.append(f"{text} at {path}:{line}:{column}")
        if self.suggestion:
            lines.append(f"Hint: {self.suggestion}")
        return "\n".join(lines)


class ModuleNotFound(BundleError):
    """No probe matched the specifier."""


class UnsupportedModuleType(BundleError):
    """The specifier resolved to a precompiled native addon."""


class HandlerLoadFailure(BundleError):
    """The runtime loader source is missing or has the wrong shape."""


class CompressionFailure(BundleError):
    """The minifier rejected the bundle."""


class IOFailure(BundleError):
    """The bundle could not be written to the output target."""
