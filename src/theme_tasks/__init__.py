"""Build, serve and watch tasks for the Sphinx documentation theme."""

__version__ = "0.1.0"
