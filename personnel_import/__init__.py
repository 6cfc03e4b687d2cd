"""Personnel CSV import pipeline.

Parses personnel CSV exports, validates every row, deduplicates against the
record store and commits the valid subset in one transaction.
"""

__version__ = "0.1.0"
