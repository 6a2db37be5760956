# backend/ninja_missions/models/__init__.py
from ninja_missions.db import Base

# import all model modules so tables get registered on Base.metadata
from .ninja import Ninja
from .mission import Mission
from .assignment import Assignment


__all__ = [
    "Base",
    "Ninja",
    "Mission",
    "Assignment",
]
