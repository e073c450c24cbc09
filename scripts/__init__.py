"""Operator entry points for the progress console."""
