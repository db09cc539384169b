# competitor_email/db/models.py
"""Documents read from the intelligence store."""

import json
from typing import Any

from bson import json_util
from bson.json_util import RELAXED_JSON_OPTIONS
from pydantic import BaseModel, ConfigDict, Field

ENTITY_TYPE_COMPETITOR = "competitor"

COUNTER_FIELDS = ("compliance_mentions", "pricing_mentions", "product_mentions")


def to_plain_json(value: Any) -> Any:
    """Convert BSON values to plain JSON types (relaxed Extended JSON)."""
    return json.loads(json_util.dumps(value, json_options=RELAXED_JSON_OPTIONS))


def _as_count(value: Any) -> int:
    if isinstance(value, dict):
        value = value.get("$numberDecimal")
    try:
        return int(float(value or 0))
    except (TypeError, ValueError, OverflowError):
        return 0


class SignalsRecord(BaseModel):
    """Aggregated website signals for one competitor of one organization."""

    model_config = ConfigDict(extra="ignore")

    org_id: str
    entity_id: str
    entity_type: str = ENTITY_TYPE_COMPETITOR
    signals: Any = None
    compliance_mentions: int = 0
    pricing_mentions: int = 0
    product_mentions: int = 0

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "SignalsRecord":
        """
        Build a record from a raw store document.

        Counters live in the nested `signals` payload; top-level fields
        are used when the payload does not carry them.
        """
        payload = to_plain_json(doc.get("signals"))
        nested = payload if isinstance(payload, dict) else {}

        counters = {
            name: _as_count(nested.get(name, doc.get(name)))
            for name in COUNTER_FIELDS
        }
        return cls(
            org_id=str(doc.get("org_id", "")),
            entity_id=str(doc.get("entity_id", "")),
            entity_type=doc.get("entity_type", ENTITY_TYPE_COMPETITOR),
            signals=payload,
            **counters,
        )


class KnowledgeChunk(BaseModel):
    """A fragment of text evidence about a competitor."""

    model_config = ConfigDict(extra="ignore")

    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "KnowledgeChunk":
        metadata = doc.get("metadata")
        return cls(
            content=doc.get("content") or "",
            metadata=metadata if isinstance(metadata, dict) else {},
        )
