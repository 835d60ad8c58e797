"""
Kaleidoscope Command-Line Interface
===================================

- **kfront**: read Kaleidoscope source and dump the parsed constructs

Implemented as a Click application with help and error reporting.
"""

__all__ = ["kfront"]
