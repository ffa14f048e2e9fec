"""Template catalog loader."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from .models import Item, ItemType, Section, Template, TemplateError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_PATH = Path(__file__).parent / "default_template.yaml"


def _parse_item(data: dict[str, Any]) -> Item:
    try:
        item_type = ItemType(data.get("type", "text"))
    except ValueError:
        raise TemplateError(
            f"Item '{data.get('id')}' has unknown type '{data.get('type')}'"
        ) from None

    return Item(
        id=str(data["id"]),
        label=str(data["label"]),
        type=item_type,
        description=data.get("description", "") or "",
        required=bool(data.get("required", False)),
        options=tuple(str(option) for option in data.get("options") or ()),
    )


def template_from_dict(data: dict[str, Any]) -> Template:
    """
    Build a Template from its dict form.

    Args:
        data: Mapping with ``version``, ``name`` and ``sections``

    Returns:
        Validated Template

    Raises:
        TemplateError: If a required key is missing or an invariant fails
    """
    try:
        sections = tuple(
            Section(
                id=str(section_data["id"]),
                title=str(section_data["title"]),
                items=tuple(_parse_item(item) for item in section_data.get("items", [])),
            )
            for section_data in data.get("sections", [])
        )
        return Template(
            version=str(data["version"]),
            name=str(data["name"]),
            sections=sections,
        )
    except KeyError as e:
        raise TemplateError(f"Template definition missing key: {e}") from e


def load_template(template_path: Path | None = None) -> Template:
    """
    Load a template catalog from YAML.

    Args:
        template_path: Path to catalog YAML. Defaults to bundled template.

    Returns:
        Loaded Template
    """
    if template_path is None:
        template_path = DEFAULT_TEMPLATE_PATH

    if not template_path.exists():
        raise FileNotFoundError(f"Template catalog not found: {template_path}")

    with open(template_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise TemplateError(f"Template catalog is not a mapping: {template_path}")

    template = template_from_dict(data)
    item_count = sum(len(section.items) for section in template.sections)
    logger.info(
        f"Loaded template '{template.name}' v{template.version}: "
        f"{len(template.sections)} sections, {item_count} items"
    )
    return template


@lru_cache(maxsize=1)
def default_template() -> Template:
    """Return the bundled template, loaded once."""
    return load_template()
