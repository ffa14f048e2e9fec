"""Questionnaire template catalog."""

from .catalog import DEFAULT_TEMPLATE_PATH, default_template, load_template, template_from_dict
from .models import Item, ItemType, Section, Template, TemplateError

__all__ = [
    "Item",
    "ItemType",
    "Section",
    "Template",
    "TemplateError",
    "DEFAULT_TEMPLATE_PATH",
    "default_template",
    "load_template",
    "template_from_dict",
]
