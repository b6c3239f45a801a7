"""Operational scripts: migrations and local table setup."""
