"""
Core module - Pure domain logic with no external dependencies.

This module contains:
- domain/: Entities, the local document model, enums and events
- ports/: Abstract interfaces that adapters must implement
"""

from .domain import *
from .ports import *
