"""Workflows for Wolfi package and image development."""
