from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from models import CompanyRecord, EmployeeRecord


class MergePolicy(str, Enum):
    # Never overwrite a non-empty stored value with an empty incoming one
    FILL = "fill"
    # Incoming row replaces the stored row wholesale (only the id survives)
    REPLACE = "replace"


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in ("", "[]", "{}")
    return False


def merge_employee(existing: Optional[EmployeeRecord], incoming: EmployeeRecord, policy: MergePolicy = MergePolicy.FILL) -> EmployeeRecord:
    """Combine a stored employee with a newly arrived one for the same profile URL.

    Pure: neither argument is modified. The result carries the stored id.
    Under FILL, ``is_enriched`` never goes back from 1 to 0.
    """
    if existing is None:
        return incoming.model_copy(update={"id": None})
    if policy is MergePolicy.REPLACE:
        return incoming.model_copy(update={"id": existing.id})

    merged: Dict[str, Any] = {}
    for name in EmployeeRecord.model_fields:
        if name == "id":
            continue
        new = getattr(incoming, name)
        old = getattr(existing, name)
        merged[name] = old if is_empty(new) else new
    merged["id"] = existing.id
    merged["is_enriched"] = bool(existing.is_enriched or incoming.is_enriched)
    if existing.is_enriched and not incoming.is_enriched:
        # A failed re-attempt does not relabel an enriched row
        merged["enrichment_outcome"] = existing.enrichment_outcome
        merged["last_enriched_at"] = existing.last_enriched_at
    return EmployeeRecord.model_validate(merged)


def company_changes(
    existing: CompanyRecord,
    website: Optional[str],
    domain: Optional[str],
    linkedin_url: Optional[str],
) -> Dict[str, Any]:
    """Supplied, non-empty attributes that differ from the stored company.

    An empty dict means the resolution is a no-op.
    """
    supplied = {"website": website, "domain": domain, "linkedin_url": linkedin_url}
    return {
        key: value
        for key, value in supplied.items()
        if not is_empty(value) and value != getattr(existing, key)
    }
