"""Issue draft generation."""

from .generator import AgentIssueGenerator, GenerationError, IssueGenerator, extract_json_object
from .models import GeneratedIssue, GenerationRequest
from .prompts import SYSTEM_PROMPT, build_generation_prompt

__all__ = [
    "AgentIssueGenerator",
    "GeneratedIssue",
    "GenerationError",
    "GenerationRequest",
    "IssueGenerator",
    "SYSTEM_PROMPT",
    "build_generation_prompt",
    "extract_json_object",
]
