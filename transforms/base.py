from __future__ import annotations

from typing import Iterable, Optional

from documents.document_models import Document, MigrationPlan, PatchDescriptor

TRANSACTION = "transaction"
PER_DOCUMENT = "per-document"


class DocumentTransform:
    """
    One named migration: turns a document into a patch, or None when the
    document needs no change. Subclasses implement `patch_document`; `plan`
    applies it to a whole dataset.
    """

    name: str = ""
    commit_mode: str = TRANSACTION

    def patch_document(self, document: Document) -> Optional[PatchDescriptor]:
        raise NotImplementedError

    def plan(self, documents: Iterable[Document]) -> MigrationPlan:
        patches = [p for p in map(self.patch_document, documents) if p is not None]
        return MigrationPlan(patches=patches)
