"""Kernel of the progress console: errors, logging, time, shared domain values."""
