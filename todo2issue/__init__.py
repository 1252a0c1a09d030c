"""todo2issue: turn TODO comments into GitHub issues, idempotently."""

__version__ = "0.1.0"
