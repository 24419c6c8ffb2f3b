from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from documents.document_models import Document, JsonValue, KeyPath, PatchDescriptor
from documents.hash_utils import KeyAllocator
from documents.paths import serialize_path
from documents.tree_walker import walk
from transforms.base import PER_DOCUMENT, DocumentTransform

KNOWN_SPAN_KEYS = ("_type", "_key", "text")


class BlockSpansTransform(DocumentTransform):
    """
    Convert legacy rich-text blocks from `spans` to `children` + `markDefs`.

    Each span becomes a child that keeps its known keys (and any non-object
    values). Every other key holding a non-empty object is treated as a
    custom mark: it is moved into `markDefs` as `{..., _type: <key>, _key}`
    and the generated key is appended to the child's `marks`. Empty custom
    objects are dropped.

    Keys come from the run's KeyAllocator, so the same allocator must be
    shared by every document of a run.
    """

    name = "block-spans-to-children"

    def __init__(
        self,
        allocator: KeyAllocator,
        block_type: str = "block",
        legacy_field: str = "spans",
        known_span_keys: Sequence[str] = KNOWN_SPAN_KEYS,
        commit_mode: str = PER_DOCUMENT,
    ):
        self.allocator = allocator
        self.block_type = block_type
        self.legacy_field = legacy_field
        self.known_span_keys = tuple(known_span_keys)
        self.commit_mode = commit_mode

    def migrate_spans(
        self, spans: List[Any]
    ) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
        mark_defs: List[Dict[str, Any]] = []
        children = [
            self._span_to_child(span, mark_defs) if isinstance(span, dict) else span
            for span in spans
        ]

        # child keys are allocated only after every mark key
        for child in children:
            if isinstance(child, dict) and not child.get("_key"):
                child["_key"] = self.allocator.allocate(child)
        return children, mark_defs

    def _span_to_child(
        self, span: Dict[str, Any], mark_defs: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        child: Dict[str, Any] = {"marks": list(span.get("marks") or [])}
        for key, value in span.items():
            if key == "marks":
                continue
            if key in self.known_span_keys or not isinstance(value, dict):
                child[key] = value
                continue
            if not value:
                continue

            mark_key = self.allocator.allocate(value)
            child["marks"].append(mark_key)
            if not any(d["_key"] == mark_key for d in mark_defs):
                mark_defs.append({**value, "_type": key, "_key": mark_key})
        return child

    def _collect(
        self, acc: PatchDescriptor, value: JsonValue, path: KeyPath
    ) -> PatchDescriptor:
        if not isinstance(value, dict) or value.get("_type") != self.block_type:
            return acc
        spans = value.get(self.legacy_field)
        if not isinstance(spans, list):
            return acc

        children, mark_defs = self.migrate_spans(spans)
        acc.set[serialize_path(path + ("children",))] = children
        acc.set[serialize_path(path + ("markDefs",))] = mark_defs
        acc.unset.append(serialize_path(path + (self.legacy_field,)))
        return acc

    def patch_document(self, document: Document) -> Optional[PatchDescriptor]:
        patch = walk(
            document,
            self._collect,
            PatchDescriptor(document_id=document["_id"], document=document),
        )
        return None if not patch.unset else patch
