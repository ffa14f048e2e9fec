"""Data models for the questionnaire template."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TemplateError(ValueError):
    """Template definition violates a catalog invariant."""


class ItemType(Enum):
    """Input kind of a template item."""

    TEXT = "text"  # single-line text
    TEXTAREA = "textarea"  # multi-line text
    SELECT = "select"  # single choice from options
    CHECKBOX = "checkbox"  # multiple choices from options

    @property
    def has_options(self) -> bool:
        return self in (ItemType.SELECT, ItemType.CHECKBOX)

    @property
    def is_multi(self) -> bool:
        return self is ItemType.CHECKBOX


@dataclass(frozen=True)
class Item:
    """A single questionnaire item."""

    id: str
    label: str
    type: ItemType
    description: str = ""
    required: bool = False
    options: tuple[str, ...] = ()

    def __post_init__(self):
        if self.type.has_options:
            if not self.options:
                raise TemplateError(f"Item '{self.id}' ({self.type.value}) needs options")
            if len(set(self.options)) != len(self.options):
                raise TemplateError(f"Item '{self.id}' has duplicate options")
        elif self.options:
            raise TemplateError(f"Item '{self.id}' ({self.type.value}) cannot have options")

    def empty_value(self) -> str | tuple[str, ...]:
        """Value a freshly selected item starts with."""
        return () if self.type.is_multi else ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type.value,
            "required": self.required,
        }
        if self.description:
            data["description"] = self.description
        if self.options:
            data["options"] = list(self.options)
        return data


@dataclass(frozen=True)
class Section:
    """Ordered group of items."""

    id: str
    title: str
    items: tuple[Item, ...] = ()

    def item_ids(self) -> list[str]:
        return [item.id for item in self.items]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class Template:
    """Immutable questionnaire catalog.

    Sections and items keep their catalog order, which is the order every
    downstream consumer (validation, projection) walks them in.
    """

    version: str
    name: str
    sections: tuple[Section, ...] = ()
    _items: dict[str, tuple[Item, Section]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        section_ids: set[str] = set()
        for section in self.sections:
            if section.id in section_ids:
                raise TemplateError(f"Duplicate section id '{section.id}'")
            section_ids.add(section.id)
            for item in section.items:
                if item.id in self._items:
                    raise TemplateError(f"Duplicate item id '{item.id}'")
                self._items[item.id] = (item, section)

    def iter_items(self) -> Iterator[tuple[Section, Item]]:
        """Yield (section, item) pairs in catalog order."""
        for section in self.sections:
            for item in section.items:
                yield section, item

    def has_item(self, item_id: str) -> bool:
        return item_id in self._items

    def get_item(self, item_id: str) -> Item:
        """Look up an item by id.

        Raises:
            KeyError: If the id is not part of this template
        """
        return self._items[item_id][0]

    def section_of(self, item_id: str) -> Section:
        """Return the section owning an item."""
        return self._items[item_id][1]

    def get_section(self, section_id: str) -> Section:
        for section in self.sections:
            if section.id == section_id:
                return section
        raise KeyError(section_id)

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible shape sent along with generation requests."""
        return {
            "version": self.version,
            "name": self.name,
            "sections": [section.to_dict() for section in self.sections],
        }
