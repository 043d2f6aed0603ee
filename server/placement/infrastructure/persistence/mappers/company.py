"""Company mapper - converts between the aggregate and a records-table row."""

from typing import Any

from placement.domain.archive.model.value import EntityKind
from placement.domain.company.model.aggregate import Company


def company_to_row(company: Company) -> dict[str, Any]:
    """Convert a Company to a records-table row (kind = companies)."""
    return {
        "kind": EntityKind.COMPANIES.value,
        "id": company.id,
        "payload": company.model_dump(mode="json"),
        "version": company.version,
        "created_at": company.created_at,
        "updated_at": company.updated_at,
    }


def row_to_company(row: dict[str, Any]) -> Company:
    """Convert a records-table row to a Company.

    The payload is authoritative; legacy payloads missing the MOA flag load
    with the model defaults.
    """
    payload = dict(row["payload"])
    payload.setdefault("id", row["id"])
    payload.setdefault("created_at", row["created_at"])
    payload.setdefault("updated_at", row["updated_at"])
    payload.setdefault("version", row["version"])
    return Company.model_validate(payload)
