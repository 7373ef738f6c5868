"""A small block-based filesystem kept in a single image file, with tools to create, inspect and edit it."""

__version__ = "0.1.0"