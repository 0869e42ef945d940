"""Permissioned medical records registry."""
