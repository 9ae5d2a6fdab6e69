"""
MicroDoc.

- backend/: Note service, API, database, configuration
"""

__version__ = "0.1.0"
