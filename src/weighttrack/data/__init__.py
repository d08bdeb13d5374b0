"""Data import/export."""
