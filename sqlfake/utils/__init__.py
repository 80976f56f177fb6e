"""Utility functions and classes for sqlfake.

This package provides logging, serialization and fixture helpers.
"""
