"""Project scaffolding from templates."""

from .manager import ProjectScaffolder, ScaffoldResult
from .templates import TEMPLATE_DESCRIPTIONS, TEMPLATES

__all__ = ["ProjectScaffolder", "ScaffoldResult", "TEMPLATES", "TEMPLATE_DESCRIPTIONS"]
