"""
secrets-sync output-safety core.

Keep this module free of imports: it runs before ``bootstrap.install()``.
"""

__version__ = "1.0.0"
