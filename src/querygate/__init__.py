"""querygate: guarded natural-language-to-SQL generation and SQL validation."""

__version__ = "0.1.0"
