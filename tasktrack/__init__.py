"""
Task tracker: JSON-file REST API plus the browser-side task store.
"""

__version__ = "0.1.0"
