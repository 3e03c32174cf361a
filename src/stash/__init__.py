"""Stash - categorised bookmarks for links, images and notes.

A SQLite-backed store of content items filed under user-defined categories,
with startup maintenance that keeps category names unique and items
attached after multi-device edits.
"""

__version__ = "1.0.0"
