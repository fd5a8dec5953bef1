"""GitPanel - repository status, history and diffs for an editor's source-control panel."""

__version__ = "0.1.0"
