"""
Build configuration.

BundleOptions is the single configuration object passed through a build. The
CLI fills it from argparse; library callers construct it directly.
"""
import os
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


COMPACT = "compact"
READABLE = "readable"


class BundleOptions(BaseModel):
    """Options for one bundle build (and the rebuilds of a watch session)."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    entry: str
    cwd: str = Field(default_factory=os.getcwd)
    handler: str = "compact"
    compress: bool = False
    output: Optional[str] = None
    watch: bool = False
    verbose: bool = False
    on_success: Optional[Callable[[str], None]] = None
    on_error: Optional[Callable[[str], None]] = None

    @field_validator("entry", "handler")
    @classmethod
    def not_blank(cls, value):
        if not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("cwd")
    @classmethod
    def absolute_cwd(cls, value):
        return os.path.abspath(value)

    @model_validator(mode="after")
    def watch_needs_output(self):
        if self.watch and not self.output:
            raise ValueError("watch mode requires an output file")
        return self

    @property
    def entry_path(self) -> str:
        """Absolute path of the entry file."""
        if os.path.isabs(self.entry):
            return self.entry
        return os.path.join(self.cwd, self.entry)

    @property
    def output_path(self) -> Optional[str]:
        if self.output is None or os.path.isabs(self.output):
            return self.output
        return os.path.join(self.cwd, self.output)

    @property
    def id_policy(self) -> str:
        """Compressed bundles get compact ids, readable ones otherwise."""
        return COMPACT if self.compress else READABLE
