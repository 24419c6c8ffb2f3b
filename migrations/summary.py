from __future__ import annotations

from typing import Any, List

from documents.document_models import MigrationPlan, PatchDescriptor
from documents.hash_utils import dumps_compact


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return dumps_compact(value).decode()


def format_patch(patch: PatchDescriptor) -> str:
    lines = [f"On document: {patch.document_id}"]
    for path, value in patch.set.items():
        lines.append(f"    SET {path} = {_format_value(value)}")
    for path in patch.unset:
        lines.append(f"    UNSET {path}")
    return "\n".join(lines)


def format_plan(plan: MigrationPlan) -> str:
    """Preview of a plan: one block per document, one line per field."""
    blocks: List[str] = [format_patch(p) for p in plan.patches]
    if plan.placeholders:
        n = len(plan.placeholders)
        blocks.append(
            "WARNING: some documents reference drafts which are not yet published. "
            "These drafts need to be published before they can be referenced.\n\n"
            f"  *** IF YOU CONTINUE, {n} DOCUMENTS WILL BE PUBLISHED! ***\n"
            + "\n".join(f"    CREATE {d['_id']}" for d in plan.placeholders)
        )
    return "\n\n".join(blocks)


def format_outcome(outcome) -> str:
    if outcome.status == "noop":
        return "Nothing to do."
    if outcome.status == "cancelled":
        return "Cancelled."
    if outcome.status == "failed":
        return f"Data migration failed: {outcome.error}"
    if outcome.transaction_id:
        return (
            f"Migrated {len(outcome.document_ids)} documents "
            f"in transaction {outcome.transaction_id}."
        )
    return f"Migrated {len(outcome.document_ids)} documents."
