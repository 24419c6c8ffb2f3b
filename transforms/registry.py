from __future__ import annotations

from typing import Callable, Dict, Optional

from common.config import GlobalYAMLConfig, yaml_config
from documents.hash_utils import KeyAllocator
from transforms.base import DocumentTransform
from transforms.block_spans import BlockSpansTransform
from transforms.draft_refs import DraftReferenceTransform
from transforms.rich_date import FieldValueRenameTransform


def _rich_date(cfg: GlobalYAMLConfig, allocator: KeyAllocator) -> DocumentTransform:
    c = cfg.migrations.rich_date
    return FieldValueRenameTransform(
        field=c.field,
        match_value=c.match_value,
        replacement=c.replacement,
        commit_mode=c.commit_mode,
    )


def _draft_refs(cfg: GlobalYAMLConfig, allocator: KeyAllocator) -> DocumentTransform:
    c = cfg.migrations.draft_refs
    return DraftReferenceTransform(drafts_prefix=c.drafts_prefix, commit_mode=c.commit_mode)


def _block_spans(cfg: GlobalYAMLConfig, allocator: KeyAllocator) -> DocumentTransform:
    c = cfg.migrations.block_spans
    return BlockSpansTransform(
        allocator,
        block_type=c.block_type,
        legacy_field=c.legacy_field,
        known_span_keys=c.known_span_keys,
        commit_mode=c.commit_mode,
    )


TRANSFORMS: Dict[str, Callable[[GlobalYAMLConfig, KeyAllocator], DocumentTransform]] = {
    FieldValueRenameTransform.name: _rich_date,
    DraftReferenceTransform.name: _draft_refs,
    BlockSpansTransform.name: _block_spans,
}


def build_transform(
    name: str,
    cfg: Optional[GlobalYAMLConfig] = None,
    allocator: Optional[KeyAllocator] = None,
) -> DocumentTransform:
    """
    Build the named migration from config. Pass a fresh allocator per run;
    one is created here when omitted.
    """
    cfg = cfg or yaml_config
    try:
        factory = TRANSFORMS[name]
    except KeyError:
        raise ValueError(f"Unknown migration: {name}") from None
    if allocator is None:
        allocator = KeyAllocator(length=cfg.migrations.block_spans.key_length)
    return factory(cfg, allocator)
