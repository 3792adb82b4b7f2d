"""
Pydantic models for the copy-generation LLM output.

Expected JSON (camelCase, as requested in the prompt):
{
  "recommendations": [
    {
      "productId": "prod-003",
      "comparison": "...",
      "ecoCreds": 40,
      "carbonSavings": 1.8,
      "reasonForRecommendation": "..."
    }
  ],
  "reasoning": "..."
}

Entry fields are individually optional: a field with the wrong type is
dropped (set to None) and later replaced by the deterministic default.
A payload whose overall shape is wrong fails validation as a whole.
"""
import json
import math
import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class CopyEntry(BaseModel):
    """Copy the LLM wrote for one alternative."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    product_id: Optional[str] = Field(None, alias="productId")
    comparison: Optional[str] = None
    eco_credits: Optional[float] = Field(None, alias="ecoCreds")
    carbon_savings: Optional[float] = Field(None, alias="carbonSavings")
    reason_for_recommendation: Optional[str] = Field(None, alias="reasonForRecommendation")

    @field_validator("eco_credits", "carbon_savings", mode="before")
    @classmethod
    def drop_non_numeric(cls, value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return None
        if not isinstance(value, (int, float)) or not math.isfinite(value):
            return None
        return value

    @field_validator("product_id", "comparison", "reason_for_recommendation", mode="before")
    @classmethod
    def drop_blank_text(cls, value: Any) -> Optional[str]:
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()


class CopyPayload(BaseModel):
    """Top-level LLM response."""

    recommendations: List[CopyEntry] = Field(default_factory=list)
    reasoning: Optional[str] = None

    @field_validator("reasoning", mode="before")
    @classmethod
    def drop_blank_reasoning(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()


class SchemaValidationError(Exception):
    """Raised when LLM output cannot be turned into a CopyPayload."""

    def __init__(self, agent: str, message: str, raw_output: Optional[str] = None):
        super().__init__(message)
        self.agent = agent
        self.raw_output = raw_output


def parse_copy_payload(content: str, agent: str = "copywriter") -> CopyPayload:
    """
    Extract and validate the JSON object embedded in an LLM message.

    Takes everything from the first "{" to the last "}", which tolerates
    prose or markdown fences around the JSON.

    Raises:
        SchemaValidationError if no valid payload can be extracted.
    """
    match = _JSON_OBJECT.search(content or "")
    if not match:
        raise SchemaValidationError(agent, "No JSON object found in LLM output", raw_output=content)

    try:
        raw = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise SchemaValidationError(agent, f"Invalid JSON in LLM output: {exc}", raw_output=content) from exc

    try:
        return CopyPayload.model_validate(raw)
    except ValidationError as exc:
        raise SchemaValidationError(agent, f"Invalid copy payload: {exc}", raw_output=content) from exc
