"""Selection model: which template items are chosen and their values.

An item is selected exactly when it has an entry; there is no separate
"selected" flag. The model is immutable: every mutation returns a new
``SelectionModel`` so callers can detect changes by identity.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from webprod.template import Item, ItemType, Section, Template

Value = str | tuple[str, ...]


class SelectionError(ValueError):
    """Selection operation referenced an unknown item or a malformed value."""


@dataclass(frozen=True)
class SelectionEntry:
    """A selected item and its current value."""

    item_id: str
    section_id: str
    value: Value

    def to_dict(self) -> dict[str, Any]:
        """Wire shape: ``{itemId, sectionId, value}``."""
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {"itemId": self.item_id, "sectionId": self.section_id, "value": value}


class SelectionModel:
    """Immutable mapping of item id to SelectionEntry for one template."""

    def __init__(
        self,
        template: Template,
        entries: Mapping[str, SelectionEntry] | None = None,
    ):
        self._template = template
        self._entries: dict[str, SelectionEntry] = dict(entries or {})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def template(self) -> Template:
        return self._template

    def is_selected(self, item_id: str) -> bool:
        return item_id in self._entries

    def get(self, item_id: str) -> SelectionEntry | None:
        return self._entries.get(item_id)

    def entries(self) -> list[SelectionEntry]:
        """Entries in catalog order."""
        return [
            self._entries[item.id]
            for _section, item in self._template.iter_items()
            if item.id in self._entries
        ]

    def to_selected_items(self) -> list[dict[str, Any]]:
        """Catalog-ordered ``{itemId, sectionId, value}`` payload."""
        return [entry.to_dict() for entry in self.entries()]

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SelectionModel):
            return NotImplemented
        return self._template == other._template and self._entries == other._entries

    def __hash__(self) -> int:
        return hash(frozenset(self._entries.items()))

    def __repr__(self) -> str:
        return f"SelectionModel({len(self._entries)} selected)"

    # ------------------------------------------------------------------
    # Mutations (each returns a new model)
    # ------------------------------------------------------------------

    def toggle_item(self, item: Item, section_id: str) -> "SelectionModel":
        """Select an unselected item with an empty value, or drop a selected one.

        Dropping discards whatever value had been entered.
        """
        self._check_membership(item, section_id)
        entries = dict(self._entries)
        if item.id in entries:
            del entries[item.id]
        else:
            entries[item.id] = SelectionEntry(item.id, section_id, item.empty_value())
        return SelectionModel(self._template, entries)

    def select_all_in_section(self, section: Section) -> "SelectionModel":
        """Select every item of a section; already selected items keep their value."""
        self._check_section(section)
        entries = dict(self._entries)
        for item in section.items:
            if item.id not in entries:
                entries[item.id] = SelectionEntry(item.id, section.id, item.empty_value())
        return SelectionModel(self._template, entries)

    def deselect_all_in_section(self, section: Section) -> "SelectionModel":
        """Drop every item of a section along with its value."""
        self._check_section(section)
        entries = dict(self._entries)
        for item in section.items:
            entries.pop(item.id, None)
        return SelectionModel(self._template, entries)

    def update_value(self, item_id: str, value: str | Iterable[str]) -> "SelectionModel":
        """Replace the value of a selected item.

        Unselected items are left alone and the same model is returned.
        """
        existing = self._entries.get(item_id)
        if existing is None:
            if not self._template.has_item(item_id):
                raise SelectionError(f"Unknown item id '{item_id}'")
            return self

        item = self._template.get_item(item_id)
        entries = dict(self._entries)
        entries[item_id] = SelectionEntry(
            existing.item_id, existing.section_id, normalize_value(item, value)
        )
        return SelectionModel(self._template, entries)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_membership(self, item: Item, section_id: str) -> None:
        if not self._template.has_item(item.id):
            raise SelectionError(f"Unknown item id '{item.id}'")
        owner = self._template.section_of(item.id)
        if owner.id != section_id:
            raise SelectionError(
                f"Item '{item.id}' belongs to section '{owner.id}', not '{section_id}'"
            )

    def _check_section(self, section: Section) -> None:
        try:
            self._template.get_section(section.id)
        except KeyError:
            raise SelectionError(f"Unknown section id '{section.id}'") from None


def normalize_value(item: Item, value: str | Iterable[str]) -> Value:
    """Coerce a raw value into the shape stored for the item's type.

    Checkbox values are de-duplicated and kept in option order so the same
    choices always render the same way.

    Raises:
        SelectionError: If the value does not fit the item type
    """
    if item.type in (ItemType.TEXT, ItemType.TEXTAREA):
        if not isinstance(value, str):
            raise SelectionError(f"Item '{item.id}' expects text, got {type(value).__name__}")
        return value

    if item.type is ItemType.SELECT:
        if not isinstance(value, str):
            raise SelectionError(f"Item '{item.id}' expects one option")
        if value and value not in item.options:
            raise SelectionError(f"'{value}' is not an option of '{item.id}'")
        return value

    if item.type is ItemType.CHECKBOX:
        if isinstance(value, str):
            raise SelectionError(f"Item '{item.id}' expects a list of options")
        chosen = set(value)
        unknown = chosen.difference(item.options)
        if unknown:
            raise SelectionError(f"{sorted(unknown)} are not options of '{item.id}'")
        return tuple(option for option in item.options if option in chosen)

    raise SelectionError(f"Unsupported item type: {item.type}")
