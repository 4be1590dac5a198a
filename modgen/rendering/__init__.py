"""Template rendering for generated bindings."""

from .funcs import TemplateFuncs
from .renderer import SECTION_TEMPLATES, TemplateRenderer

__all__ = ["SECTION_TEMPLATES", "TemplateFuncs", "TemplateRenderer"]
