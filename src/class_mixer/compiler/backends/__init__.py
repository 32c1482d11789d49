"""
Code Emission Backends.
"""

from class_mixer.compiler.backends.python import HEADER_COMMENT, PythonBackend, is_literal_source

__all__ = ["HEADER_COMMENT", "PythonBackend", "is_literal_source"]
