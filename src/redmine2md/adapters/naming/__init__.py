"""
Naming - Filenames for synced issue files.
"""

from .slug import FilenameGenerator, generate_filename, generate_slug

__all__ = ["FilenameGenerator", "generate_filename", "generate_slug"]
