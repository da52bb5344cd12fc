"""Shared helpers for Task Metrics."""
