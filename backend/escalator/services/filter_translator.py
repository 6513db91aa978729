"""
Natural-Language Filter Translator

Turns a free-text request ("finance files pending more than 30 days") into
filter groups by asking Gemini through its REST API. The model's answer is
never trusted: it must parse as JSON, fit the FilterGroup schema, and pass
the same column registry validation as any saved configuration. Anything
else is rejected, never patched into a best guess.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from escalator.core.config import Settings, settings
from escalator.schema.filters import ColumnType, FilterGroup
from escalator.services.filters import columns
from escalator.services.filters.validator import FilterValidationError, validate_groups

logger = logging.getLogger(__name__)


class TranslationErrorReason(str, Enum):
    REQUEST_FAILED = "request_failed"
    EMPTY_RESPONSE = "empty_response"
    UNPARSEABLE = "unparseable"
    INVALID_STRUCTURE = "invalid_structure"
    SCHEMA_MISMATCH = "schema_mismatch"


class TranslationError(Exception):

    def __init__(self, reason: TranslationErrorReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message


class TranslatorNotConfigured(Exception):
    pass


FENCE_PATTERN = re.compile(r"```(?:json)?\s*")


def build_prompt(query: str) -> str:
    column_list = ", ".join(f"{c.key}({c.type.value})" for c in columns.list_columns())
    operator_list = ", ".join(
        f"{type_.value}({','.join(op.value for op in columns.operators_for(type_))})"
        for type_ in ColumnType
    )

    return f"""Convert natural language to filter conditions.

Columns: {column_list}

Operators: {operator_list}

Rules:
- Column comparisons: use column_* operators with compareColumn
- Strings: 'contains' for partial, 'equals' for exact
- Numbers: use appropriate comparison operators
- Booleans: 'equals' with 'true'/'false'
- Default logic: AND

Format:
{{"filters":[{{"id":"id","conditions":[{{"column":"key","operator":"op","value":0,"compareColumn":"key"}}],"logic":"AND"}}]}}

Query: {query.strip()}

JSON only:"""


def parse_response_text(text: str) -> List[FilterGroup]:
    """Parse and validate the model's raw text answer.

    Raises:
        TranslationError: unparseable JSON, wrong shape, or registry mismatch
    """
    cleaned = FENCE_PATTERN.sub("", text or "").strip()
    if not cleaned:
        raise TranslationError(TranslationErrorReason.EMPTY_RESPONSE, "AI returned an empty response")

    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse Gemini response: {e}. Raw response: {text[:500]}")
        raise TranslationError(TranslationErrorReason.UNPARSEABLE, "Failed to parse AI response") from e

    if not isinstance(payload, dict) or not isinstance(payload.get("filters"), list):
        raise TranslationError(TranslationErrorReason.INVALID_STRUCTURE, "Invalid response format from AI")

    try:
        groups = [FilterGroup.model_validate(group) for group in payload["filters"]]
    except ValidationError as e:
        raise TranslationError(TranslationErrorReason.INVALID_STRUCTURE, "Invalid filter group structure") from e

    try:
        validate_groups(groups)
    except FilterValidationError as e:
        raise TranslationError(TranslationErrorReason.SCHEMA_MISMATCH, e.message) from e

    return groups


class FilterTranslator:

    API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    @classmethod
    def from_settings(cls, config: Settings) -> "FilterTranslator":
        return cls(api_key=config.GEMINI_API_KEY, model=config.GEMINI_MODEL, timeout=config.GEMINI_TIMEOUT)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _generate(self, prompt: str) -> Dict[str, Any]:
        url = f"{self.API_BASE}/{self.model}:generateContent"

        try:
            response = self.session.post(
                url,
                params={"key": self.api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            raise TranslationError(TranslationErrorReason.REQUEST_FAILED, f"Request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Gemini API error {response.status_code}: {response.text[:200]}")
            raise TranslationError(
                TranslationErrorReason.REQUEST_FAILED,
                f"API error {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise TranslationError(TranslationErrorReason.UNPARSEABLE, "Gemini returned a non-JSON body") from e

    @staticmethod
    def _response_text(data: Dict[str, Any]) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return ""
        return "".join(part.get("text", "") for part in parts if isinstance(part, dict))

    def translate(self, query: str) -> List[FilterGroup]:
        if not self.is_configured():
            raise TranslatorNotConfigured("Gemini API key not configured")

        data = self._generate(build_prompt(query))

        usage = data.get("usageMetadata")
        if usage:
            logger.debug(f"Gemini token usage: {usage}")

        groups = parse_response_text(self._response_text(data))
        logger.info(f"Translated prompt into {len(groups)} filter group(s)")

        return groups


filter_translator = FilterTranslator.from_settings(settings)
