"""Presentation layer for dbauth."""
