from __future__ import annotations

from enum import Enum


class ModelRole(str, Enum):
    PLANNER = "PLANNER"
