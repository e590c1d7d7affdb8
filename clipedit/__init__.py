"""
Interactive command-line video editor.
"""

__version__ = "0.1.0"
