"""Issue generation: turns projected records into a draft summary/description.

``IssueGenerator`` is the seam the workflow depends on; ``AgentIssueGenerator``
is the production implementation backed by a Strands agent.
"""

import json
import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from webprod.config import DEFAULT_GENERATION_MAX_TOKENS, DEFAULT_GENERATION_TEMPERATURE

from .models import GeneratedIssue, GenerationRequest
from .prompts import SYSTEM_PROMPT, build_generation_prompt

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Generation call failed or returned an unusable response."""


class IssueGenerator(ABC):
    """Generation collaborator."""

    @abstractmethod
    def generate(self, request: GenerationRequest) -> GeneratedIssue:
        """
        Produce a draft issue from a generation request.

        Raises:
            GenerationError: On any failure
        """


def extract_json_object(text: str) -> dict | None:
    """Extract a JSON object from an LLM text response.

    Handles responses wrapped in markdown code blocks and trailing commas.
    """

    def try_parse(json_str: str) -> dict | None:
        try:
            parsed = json.loads(json_str)
        except json.JSONDecodeError:
            # Trailing commas before ] or }
            fixed = re.sub(r",\s*([}\]])", r"\1", json_str)
            try:
                parsed = json.loads(fixed)
            except json.JSONDecodeError:
                return None
        return parsed if isinstance(parsed, dict) else None

    code_block = re.search(r"```(?:json)?\s*\n?(.*?)\n?```", text, re.DOTALL)
    if code_block:
        result = try_parse(code_block.group(1))
        if result:
            return result

    result = try_parse(text)
    if result:
        return result

    obj_match = re.search(r"\{[\s\S]*\}", text)
    if obj_match:
        return try_parse(obj_match.group(0))

    return None


def _create_default_agent(max_tokens: int, temperature: float) -> Any:
    from strands import Agent

    from webprod.agents import create_model

    model = create_model(max_tokens=max_tokens, temperature=temperature)
    return Agent(
        model=model,
        name="issue_generation_agent",
        system_prompt=SYSTEM_PROMPT,
        structured_output_model=GeneratedIssue,
        callback_handler=None,
    )


class AgentIssueGenerator(IssueGenerator):
    """Generates issue drafts with a Strands agent.

    Example:
        generator = AgentIssueGenerator()
        issue = generator.generate(GenerationRequest.from_selection(template, selection))
    """

    def __init__(
        self,
        agent_factory: Callable[[], Any] | None = None,
        max_tokens: int = DEFAULT_GENERATION_MAX_TOKENS,
        temperature: float = DEFAULT_GENERATION_TEMPERATURE,
    ):
        """Initialize the generator.

        Args:
            agent_factory: Builds a fresh agent per call. Defaults to a Strands
                agent on the active LLM provider.
            max_tokens: Response token limit for the default agent
            temperature: Sampling temperature for the default agent
        """
        self._agent_factory = agent_factory or (
            lambda: _create_default_agent(max_tokens, temperature)
        )

    def generate(self, request: GenerationRequest) -> GeneratedIssue:
        if not request.records:
            raise GenerationError("No non-empty items to generate from")

        prompt = build_generation_prompt(request.records)
        start_time = time.time()

        try:
            agent = self._agent_factory()
            result = agent(prompt)
        except Exception as e:
            logger.error(f"Generation agent failed: {e}", exc_info=True)
            raise GenerationError(f"Generation agent failed: {e}") from e

        issue = self._parse_result(result)
        logger.info(
            f"Generated issue in {time.time() - start_time:.1f}s "
            f"(records={len(request.records)}, summary_len={len(issue.summary)}, "
            f"description_len={len(issue.description)})"
        )
        return issue

    def _parse_result(self, result: Any) -> GeneratedIssue:
        """Read structured output, falling back to JSON in the response text."""
        structured = getattr(result, "structured_output", None)
        if isinstance(structured, GeneratedIssue):
            return structured

        data = extract_json_object(str(result))
        if data is None:
            raise GenerationError("Generation response did not contain a JSON object")

        try:
            return GeneratedIssue.model_validate(data)
        except ValidationError as e:
            raise GenerationError(f"Malformed generation response: {e}") from e
