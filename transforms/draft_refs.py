from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from common.logger import get_logger
from documents.document_models import (
    Document,
    JsonValue,
    KeyPath,
    MigrationPlan,
    PatchDescriptor,
)
from documents.draft_ids import DRAFTS_PREFIX, get_draft_id, get_published_id, is_draft_id
from documents.paths import serialize_path
from documents.tree_walker import walk
from transforms.base import TRANSACTION, DocumentTransform

log = get_logger(__name__)


@dataclass(frozen=True)
class FixedReference:
    path: str
    fixed: Dict[str, Any]  # the reference object with `_ref` pointing at the published id


class DraftReferenceTransform(DocumentTransform):
    """
    Point strong references at published ids instead of `drafts.` ids.

    A reference can only target a published document, so when the fetched
    dataset holds a draft but no published copy of a target, `plan` also
    queues a placeholder (the draft's fields under the published id) to be
    created ahead of the patches. Targets with neither a draft nor a
    published copy are rewritten without a placeholder.
    """

    name = "fix-draft-refs"

    def __init__(self, drafts_prefix: str = DRAFTS_PREFIX, commit_mode: str = TRANSACTION):
        self.drafts_prefix = drafts_prefix
        self.commit_mode = commit_mode

    def _collect(
        self, acc: List[FixedReference], value: JsonValue, path: KeyPath
    ) -> List[FixedReference]:
        if not path or not isinstance(value, dict):
            return acc
        ref = value.get("_ref")
        if isinstance(ref, str) and not value.get("_weak") and is_draft_id(ref, self.drafts_prefix):
            fixed = {**value, "_ref": get_published_id(ref, self.drafts_prefix)}
            acc.append(FixedReference(path=serialize_path(path), fixed=fixed))
        return acc

    def find_bad_references(self, document: Document) -> List[FixedReference]:
        return walk(document, self._collect, [])

    def patch_document(self, document: Document) -> Optional[PatchDescriptor]:
        bad_refs = self.find_bad_references(document)
        if not bad_refs:
            return None
        return PatchDescriptor(
            document_id=document["_id"],
            set={r.path: r.fixed for r in bad_refs},
            document=document,
        )

    def placeholders_for(
        self, documents: Iterable[Document], patches: Iterable[PatchDescriptor]
    ) -> List[Document]:
        by_id = {d["_id"]: d for d in documents}
        placeholders: Dict[str, Document] = {}
        for patch in patches:
            for fixed in patch.set.values():
                target = fixed["_ref"]
                if get_published_id(target, self.drafts_prefix) in by_id:
                    continue
                draft = by_id.get(get_draft_id(target, self.drafts_prefix))
                if draft is None:
                    log.warning(
                        "Reference to %s from %s has no draft or published target",
                        target,
                        patch.document_id,
                    )
                    continue
                placeholders[target] = {**draft, "_id": target}
        return list(placeholders.values())

    def plan(self, documents: Iterable[Document]) -> MigrationPlan:
        documents = list(documents)
        patches = [p for p in map(self.patch_document, documents) if p is not None]
        return MigrationPlan(
            patches=patches, placeholders=self.placeholders_for(documents, patches)
        )
