# synqit/schemas/__init__.py
"""
Schema module initialization.
Exports all request schemas from submodules for convenient imports.
"""
from .auth import *
from .profile import *
from .project import *
from .partnership import *
from .message import *
