"""
Decoded Salesforce response shapes.

Only responses with a fixed Salesforce-defined schema get a model here. sObject
bodies and describe results depend on the org's configuration and stay plain
dicts.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class TokenResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    access_token: str
    instance_url: str
    token_type: str = "Bearer"
    issued_at: Optional[str] = None


class QueryPage(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    total_size: int = Field(default=0, alias="totalSize")
    done: bool = True
    records: List[Dict[str, Any]] = Field(default_factory=list)
    next_records_url: Optional[str] = Field(default=None, alias="nextRecordsUrl")


class SaveResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    success: bool = True
    errors: List[Any] = Field(default_factory=list)


class NamedRecord(BaseModel):
    """Id/name pair used for dropdown style reference lists."""

    id: str
    name: Optional[str] = None


class UserRecord(NamedRecord):
    email: Optional[str] = None


def parse_query_page(raw: Dict[str, Any]) -> Optional[QueryPage]:
    """Decode one query page, or None when the payload is empty or malformed."""
    if not raw:
        return None
    try:
        return QueryPage.model_validate(raw)
    except ValidationError:
        return None


def parse_save_result(raw: Dict[str, Any]) -> Optional[SaveResult]:
    if not raw or not raw.get("id"):
        return None
    try:
        return SaveResult.model_validate(raw)
    except ValidationError:
        return None
