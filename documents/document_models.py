from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

# A document is a JSON tree: mappings, lists and scalar leaves.
JsonValue = Union[Dict[str, Any], List[Any], str, int, float, bool, None]
Document = Dict[str, Any]
KeyPath = Tuple[Union[str, int], ...]


@dataclass
class PatchDescriptor:
    document_id: str
    set: Dict[str, Any] = field(default_factory=dict)  # path expression -> value
    unset: List[str] = field(default_factory=list)
    document: Optional[Document] = None  # source document, when the transform keeps it

    @property
    def is_noop(self) -> bool:
        return not self.set and not self.unset


@dataclass
class MigrationPlan:
    patches: List[PatchDescriptor] = field(default_factory=list)
    # documents created with createIfNotExists before any patch is applied
    placeholders: List[Document] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.patches

    @property
    def document_ids(self) -> List[str]:
        return [p.document_id for p in self.patches]
