"""
redirect_generator package initializer.
"""

from . import manager
from . import models
from . import resolver
from . import storage

__all__ = ["manager", "models", "resolver", "storage"]
