"""Type-grammar front end for the WebAssembly text format."""

__version__ = "0.1.0"
