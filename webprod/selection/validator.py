"""Required-item validation for a selection.

Every violation is collected in one pass so the operator can fix them all at
once; generation stays blocked while any remain.
"""

from dataclasses import dataclass
from enum import Enum

from webprod.template import Template

from .model import SelectionModel
from .projector import is_empty_value


class ViolationKind(Enum):
    """Why a required item fails validation."""

    MISSING = "missing"  # not selected
    EMPTY = "empty"  # selected without a value


@dataclass(frozen=True)
class Violation:
    """A required item that is not filled in."""

    section_title: str
    item_id: str
    item_label: str
    kind: ViolationKind

    @property
    def message(self) -> str:
        if self.kind is ViolationKind.MISSING:
            return f"{self.section_title} - {self.item_label} は必須項目です"
        return f"{self.section_title} - {self.item_label} に値を入力してください"


def find_violations(template: Template, selection: SelectionModel) -> list[Violation]:
    """Walk the template in catalog order and collect required-item violations."""
    violations: list[Violation] = []
    for section, item in template.iter_items():
        if not item.required:
            continue
        entry = selection.get(item.id)
        if entry is None:
            kind = ViolationKind.MISSING
        elif is_empty_value(entry.value):
            kind = ViolationKind.EMPTY
        else:
            continue
        violations.append(Violation(section.title, item.id, item.label, kind))
    return violations


def validate(template: Template, selection: SelectionModel) -> list[str]:
    """Return violation messages; an empty list means the selection is complete."""
    return [violation.message for violation in find_violations(template, selection)]
