"""Structured projection of a selection for the generation step.

The projected records are the exact input the LLM sees, so their order is
fixed by the template (section order, then item order) and never by the
order in which the operator clicked.
"""

from dataclasses import dataclass

from webprod.config import MULTI_VALUE_SEPARATOR
from webprod.template import Template

from .model import SelectionModel, Value


@dataclass(frozen=True)
class StructuredRecord:
    """One non-empty selected item, resolved for display."""

    section: str
    label: str
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"section": self.section, "label": self.label, "value": self.value}


def resolve_value(value: Value) -> str:
    """Render a stored value as text (checkbox choices joined with ", ")."""
    if isinstance(value, str):
        return value
    return MULTI_VALUE_SEPARATOR.join(value)


def is_empty_value(value: Value) -> bool:
    """True for blank strings and empty choice lists."""
    return not resolve_value(value).strip()


def project(template: Template, selection: SelectionModel) -> list[StructuredRecord]:
    """Flatten selected, non-empty items into catalog-ordered records."""
    records: list[StructuredRecord] = []
    for section, item in template.iter_items():
        entry = selection.get(item.id)
        if entry is None:
            continue
        resolved = resolve_value(entry.value)
        if not resolved.strip():
            continue
        records.append(StructuredRecord(section=section.title, label=item.label, value=resolved))
    return records
