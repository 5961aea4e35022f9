"""Operator-facing output and diagnostic logging."""
