"""express-gen: generate production-ready Express.js projects."""

__version__ = "1.0.0"
