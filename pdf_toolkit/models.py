import json
from typing import List

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class RedactionRule(BaseModel):
    """One region to black out, as fractions of the page from its top-left corner."""

    model_config = ConfigDict(strict=True, allow_inf_nan=False)

    page: int = Field(ge=1)
    x: float = Field(ge=0, le=1)
    y: float = Field(ge=0, le=1)
    width: float = Field(gt=0, le=1)
    height: float = Field(gt=0, le=1)


class HealthBinaries(BaseModel):
    qpdf: bool
    libreoffice: bool
    pdftoppm: bool


class HealthResponse(BaseModel):
    ok: bool
    binaries: HealthBinaries


class TextResponse(BaseModel):
    text: str


class ErrorResponse(BaseModel):
    error: str


def parse_redaction_rules(raw) -> List[RedactionRule]:
    """
    Parse the serialized ``redactions`` field.

    Entries that fail validation are dropped; a payload that is not a JSON
    array yields no rules at all.
    """
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("redactions payload is not valid JSON")
        return []
    if not isinstance(items, list):
        return []

    rules = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            rules.append(RedactionRule.model_validate(item))
        except ValidationError:
            continue
    dropped = len(items) - len(rules)
    if dropped:
        logger.debug(f"Dropped {dropped} invalid redaction rule(s)")
    return rules
