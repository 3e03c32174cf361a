"""Numbered schema migrations, applied in VERSION order."""
