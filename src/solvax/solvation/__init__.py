"""Solvation contributions sharing a common update and query interface."""

from .base import Solvation, available_solvation_models, new_solvation, register_solvation
from .sasa import ModelState, SASACont

__all__ = [
  "ModelState",
  "SASACont",
  "Solvation",
  "available_solvation_models",
  "new_solvation",
  "register_solvation",
]
