"""Fact extraction from captured command output."""

from .extractor import ExtractionRule, FactSet, extract
from .rules import SERVERLESS_INFO_RULES

__all__ = ["ExtractionRule", "FactSet", "extract", "SERVERLESS_INFO_RULES"]
