"""Release-tag orchestration for merged release branches."""

__version__ = "0.1.0"
