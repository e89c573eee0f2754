# CommonJS bundler - core components
"""
Core modules for the bundler:
- errors: Error taxonomy for failed builds
- options: Build configuration (pydantic model)
- lexer: Lark lexer that masks strings and comments in scripts
- resolver: Node.js style require() resolution
- registry: Per-build module graph and id allocation
- processor: Content rewriting of JSON and script modules
- handlers: Built-in and external runtime loaders
- assembler: Bundle text generation, minification and output
- watcher: Rebuild-on-change coordinator
"""

__version__ = "0.1.0"

from .errors import (
    BundleError,
    ModuleNotFound,
    UnsupportedModuleType,
    HandlerLoadFailure,
    CompressionFailure,
    IOFailure,
)
from .options import BundleOptions
from .resolver import resolve, locate
from .registry import BuildContext
from .handlers import load_handler
from .assembler import assemble
from .watcher import WatchCoordinator

__all__ = [
    'BundleError',
    'ModuleNotFound',
    'UnsupportedModuleType',
    'HandlerLoadFailure',
    'CompressionFailure',
    'IOFailure',
    'BundleOptions',
    'resolve',
    'locate',
    'BuildContext',
    'load_handler',
    'assemble',
    'WatchCoordinator',
]
