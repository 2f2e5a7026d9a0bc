"""benchdiff: compare benchmark timings between two revisions of a codebase."""

__version__ = "0.1.0"
