"""Exceptions raised by solvation models."""

from __future__ import annotations


class SolvationError(Exception):
  """Base class for errors raised by solvax."""


class UnsupportedGridSizeError(SolvationError, ValueError):
  """Requested angular grid has no entry in the Lebedev table."""


class PreconditionViolationError(SolvationError, RuntimeError):
  """A model query was made out of order or with mismatched array shapes.

  These errors point at a bug in the calling code, so solvax never catches them.
  """
