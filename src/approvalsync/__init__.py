"""Grants guild roles for applications approved in an external registry."""

__version__ = "0.1.0"
