"""Spinning ASCII torus rendered into a character grid."""

__version__ = "0.1.0"
