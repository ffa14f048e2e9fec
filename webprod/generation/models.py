"""Request and response models for issue generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field, field_validator

from webprod.selection import SelectionModel, StructuredRecord, project
from webprod.template import Template


class GeneratedIssue(BaseModel):
    """Structured output of the generation agent."""

    summary: str = Field(description="課題の件名 (30-60文字、重要キーワードを前方に配置)")
    description: str = Field(description="課題の詳細 (見出しと箇条書き「・」形式)")

    @field_validator("summary", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be blank")
        return value


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the generation collaborator receives.

    Attributes:
        selected_items: Catalog-ordered ``{itemId, sectionId, value}`` entries
        records: Projected non-empty records, the exact prompt input
        template: Template the selection was made against
    """

    selected_items: list[dict[str, Any]] = field(default_factory=list)
    records: list[StructuredRecord] = field(default_factory=list)
    template: Template | None = None

    @classmethod
    def from_selection(cls, template: Template, selection: SelectionModel) -> GenerationRequest:
        """Freeze a selection into a request via the structured projection."""
        return cls(
            selected_items=selection.to_selected_items(),
            records=project(template, selection),
            template=template,
        )

    def to_payload(self) -> dict[str, Any]:
        """Wire shape: ``{selectedItems, template}``."""
        return {
            "selectedItems": self.selected_items,
            "template": self.template.to_dict() if self.template else None,
        }
