DRAFTS_PREFIX = "drafts."


def is_draft_id(doc_id: str, prefix: str = DRAFTS_PREFIX) -> bool:
    return doc_id.startswith(prefix)


def get_published_id(doc_id: str, prefix: str = DRAFTS_PREFIX) -> str:
    return doc_id[len(prefix) :] if is_draft_id(doc_id, prefix) else doc_id


def get_draft_id(doc_id: str, prefix: str = DRAFTS_PREFIX) -> str:
    return doc_id if is_draft_id(doc_id, prefix) else f"{prefix}{doc_id}"
