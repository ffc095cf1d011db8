"""
Description and docket-number suggestions for the entry form.

Suggestions are advisory: any failure is logged and turned into an empty
result so the form keeps working without them.
"""
import json
import logging
import os
from typing import Iterable

from google import genai
from google.genai import types as genai_types
from pydantic import ValidationError

from schemas import EntryResponse, SuggestionResponse

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3

SUGGESTION_PROMPT = """You are a helpful assistant that suggests descriptions and docket numbers for timeline entries based on past entries.

Past Entries:
{past_entries}

Current Entry:
{current_entry}

Based on the past entries and the current entry, suggest relevant descriptions and docket numbers.
Return the suggestions as a JSON object with the following format:
{{
  "suggested_descriptions": ["suggestion1", "suggestion2"],
  "suggested_docket_numbers": ["docket1", "docket2"]
}}
"""


def past_entry_lines(entries: Iterable[EntryResponse], exclude_id: int | None = None) -> list[str]:
    """Render past entries for the prompt, skipping the entry being edited."""
    return [
        f"{entry.description} (Docket: {entry.docket_number or 'N/A'})"
        for entry in entries
        if exclude_id is None or entry.id != exclude_id
    ]


class SuggestionService:
    """Wraps the Gemini client used to suggest entry text."""

    def __init__(self, api_key: str | None = None, model_name: str | None = None):
        self.api_key = api_key if api_key is not None else os.getenv("GEMINI_API_KEY", "")
        self.model_name = model_name or os.getenv("SUGGESTION_MODEL_NAME", "gemini-2.0-flash")
        self.client = None
        self._client_initialized = False

    def _initialize_client(self):
        """Lazy initialization of the LLM client."""
        if self._client_initialized:
            return

        try:
            if not self.api_key:
                raise ValueError("GEMINI_API_KEY not configured")
            self.client = genai.Client(api_key=self.api_key)
            logger.info(f"Gemini client initialized for suggestions with model {self.model_name}")
        except Exception as e:
            logger.error(f"Failed to initialize Gemini client: {e}. Suggestions will be disabled.")
            self.client = None
        self._client_initialized = True

    def build_prompt(self, past_entries: list[str], current_entry: str) -> str:
        lines = "\n".join(f"- {line}" for line in past_entries) or "- (none)"
        return SUGGESTION_PROMPT.format(past_entries=lines, current_entry=current_entry)

    def suggest(self, past_entries: list[str], current_entry: str) -> SuggestionResponse:
        if len(current_entry.strip()) < MIN_QUERY_LENGTH:
            return SuggestionResponse()

        self._initialize_client()
        if not self.client:
            return SuggestionResponse()

        try:
            config = genai_types.GenerateContentConfig(
                response_mime_type="application/json",
                temperature=0.3,
            )
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=self.build_prompt(past_entries, current_entry),
                config=config,
            )
        except Exception as e:
            logger.error(f"Suggestion request failed: {e}")
            return SuggestionResponse()

        if response.prompt_feedback and response.prompt_feedback.block_reason:
            logger.error(f"Prompt blocked by Gemini: {response.prompt_feedback.block_reason}")
            return SuggestionResponse()

        if not response.text:
            logger.warning("Empty response from LLM for suggestions")
            return SuggestionResponse()

        cleaned_text = response.text.strip()
        if cleaned_text.startswith("```json"):
            cleaned_text = cleaned_text[7:].strip()
        if cleaned_text.endswith("```"):
            cleaned_text = cleaned_text[:-3].strip()

        try:
            return SuggestionResponse.model_validate(json.loads(cleaned_text))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse suggestion response: {e}. Response text: {response.text[:500]}")
            return SuggestionResponse()
