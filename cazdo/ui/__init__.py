"""Textual widgets for cazdo."""
