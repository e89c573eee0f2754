import time
from datetime import datetime

from cjs.assembler import assemble, compress, write_bundle
from cjs.handlers import load_handler
from cjs.log import debug_log, error, log, set_verbose
from cjs.options import BundleOptions
from cjs.registry import BuildContext
from cjs.watcher import WatchCoordinator


class Bundler:
    """
    Runs the bundle pipeline for one set of options.

    load() resolves the module graph from the entry file, make() turns it
    into bundle text and persists it. In watch mode the same instance is
    reused for every rebuild; the graph is reset each time.
    """

    def __init__(self, options: BundleOptions):
        self.options = options
        self.context = BuildContext(options.id_policy)
        self.coordinator = None

    def load(self):
        """Reset the graph and resolve it again from the entry file."""
        self.context.reset()
        debug_log(f"Loading entry {self.options.entry_path}")
        self.context.load(self.options.entry_path)
        debug_log(f"Loaded {len(self.context)} module(s), main is '{self.context.main}'")

    def make(self, started=None) -> str:
        """Assemble the loaded graph; write it if an output is configured."""
        started = started if started is not None else time.perf_counter()
        loader = load_handler(self.options.handler, self.options.cwd)
        bundle = assemble(self.context, loader)
        if self.options.compress:
            bundle = compress(bundle)

        output = self.options.output_path
        if output:
            write_bundle(bundle, output)
            ms = (time.perf_counter() - started) * 1e3
            size = len(bundle.encode('utf-8'))
            self.notify_success(f"{size} bytes written to {self.options.output} ({ms:.3f} ms)")
        return bundle

    def build(self) -> str:
        started = time.perf_counter()
        self.load()
        return self.make(started)

    def _stamp(self, message):
        if not self.options.watch:
            return message
        return f"{datetime.now().strftime('%H:%M:%S')} {message}"

    def notify_success(self, message):
        message = self._stamp(message)
        if self.options.on_success is not None:
            self.options.on_success(message)
        else:
            log(message)

    def notify_error(self, exc):
        """
        Report a failed build.

        Outside watch mode every error is fatal and is re-raised.
        """
        if not self.options.watch:
            raise exc
        message = self._stamp(f"{type(exc).__name__}: {exc}")
        if self.options.on_error is not None:
            self.options.on_error(message)
        else:
            error(message)

    def watch(self, **kwargs) -> WatchCoordinator:
        """Start rebuilding on every change of a bundled file."""
        self.coordinator = WatchCoordinator(
            build=self.build,
            paths=self.context.paths,
            on_error=self.notify_error,
            **kwargs,
        )
        self.coordinator.start()
        return self.coordinator


def build_bundle(options: BundleOptions, **watch_kwargs) -> str:
    """
    Bundle the entry file described by `options`.

    Args:
        options: Build configuration.
        **watch_kwargs: Passed to the WatchCoordinator in watch mode.

    Returns:
        The bundle text. In watch mode the returned text is the first build;
        later builds are only written to the output file.

    Raises:
        BundleError: If the first build fails.
    """
    set_verbose(options.verbose)
    bundler = Bundler(options)
    bundle = bundler.build()
    if options.watch:
        bundler.watch(**watch_kwargs)
    return bundle
