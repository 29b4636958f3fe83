"""Data models for cazdo."""
