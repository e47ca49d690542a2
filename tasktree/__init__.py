"""Building blocks for task-focused multi-repository Git workspaces: spec, stores, git client and tables."""

__version__ = "0.1.0"