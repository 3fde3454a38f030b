"""
redmine2md - One-way sync of Redmine issues into local Markdown files.
"""

__version__ = "0.1.0"
