"""Heuristics package: amount extraction, candidate disambiguation, and the SMS classifier."""

from .amounts import extract_amounts  # noqa: F401
from .classifier import HeuristicClassifier, evaluate  # noqa: F401
from .disambiguation import select_candidate  # noqa: F401
