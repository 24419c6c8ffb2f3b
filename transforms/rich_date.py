from __future__ import annotations

from typing import Any, Dict, Optional

from documents.document_models import Document, JsonValue, KeyPath, PatchDescriptor
from documents.paths import serialize_path
from documents.tree_walker import walk
from transforms.base import TRANSACTION, DocumentTransform


class FieldValueRenameTransform(DocumentTransform):
    """
    Replace every `<field>: <match_value>` pair, at any depth, with
    `<field>: <replacement>`. With the defaults this retags legacy `date`
    objects as `richDate`.
    """

    name = "date-to-rich-date"

    def __init__(
        self,
        field: str = "_type",
        match_value: Any = "date",
        replacement: Any = "richDate",
        commit_mode: str = TRANSACTION,
    ):
        self.field = field
        self.match_value = match_value
        self.replacement = replacement
        self.commit_mode = commit_mode

    def _collect(
        self, acc: Dict[str, Any], value: JsonValue, path: KeyPath
    ) -> Dict[str, Any]:
        if path and path[-1] == self.field and value == self.match_value:
            acc[serialize_path(path)] = self.replacement
        return acc

    def patch_document(self, document: Document) -> Optional[PatchDescriptor]:
        to_set = walk(document, self._collect, {})
        if not to_set:
            return None
        return PatchDescriptor(
            document_id=document["_id"], set=to_set, document=document
        )
