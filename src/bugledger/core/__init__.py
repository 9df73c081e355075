"""
Core module - Pure domain logic with no external dependencies.

This module contains:
- domain/: Entities, the criticality codec and domain events
- ports/: Abstract interfaces that adapters must implement
- exceptions: Engine outcome errors
"""

from .domain import *
from .ports import *
from .exceptions import *
