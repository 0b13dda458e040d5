"""API initialization modules."""
