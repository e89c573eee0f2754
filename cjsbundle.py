import argparse
import os
import sys
import time

from pydantic import ValidationError

from builder import Bundler
from cjs import __version__
from cjs.errors import BundleError
from cjs.handlers import available_handlers
from cjs.log import log, set_verbose
from cjs.options import BundleOptions


def parse_options(argv=None):
    parser = argparse.ArgumentParser(
        prog="cjsbundle",
        description="Bundle a CommonJS entry script and everything it requires into one file",
    )
    parser.add_argument("file", help="Entry script")
    parser.add_argument("-H", "--handler", default="compact",
                        help=f"Runtime loader: {', '.join(available_handlers())} or a path to a .js file (default: compact)")
    parser.add_argument("-c", "--compress", action="store_true", help="Minify the bundle")
    parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    parser.add_argument("-w", "--watch", action="store_true", help="Rebuild whenever a bundled file changes")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    try:
        return BundleOptions(
            entry=args.file,
            cwd=os.getcwd(),
            handler=args.handler,
            compress=args.compress,
            output=args.output,
            watch=args.watch,
            verbose=args.verbose,
        )
    except ValidationError as e:
        parser.error("; ".join(err["msg"] for err in e.errors()))


def wait(coordinator):
    """Block until interrupted, then close the watches."""
    log(f"Watching {len(coordinator.watched)} file(s), press Ctrl+C to stop")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        coordinator.stop()


def main(argv=None):
    options = parse_options(argv)
    set_verbose(options.verbose)
    bundler = Bundler(options)

    try:
        bundle = bundler.build()
    except BundleError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)

    if not options.output:
        print(bundle)
    if options.watch:
        wait(bundler.watch())


if __name__ == "__main__":
    main()
