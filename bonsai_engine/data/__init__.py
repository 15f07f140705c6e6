"""Packaged rule data and its loader."""
