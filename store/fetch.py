from __future__ import annotations

from typing import List

from tqdm import tqdm

from common.config import yaml_config
from common.logger import get_logger
from documents.document_models import Document
from store.sanity_client import SanityClient

log = get_logger(__name__)

# everything except system documents (ids under "_.")
BULK_QUERY = '*[!(_id in path("_.**"))][0...{limit}]'
PAGE_QUERY = "* | order(_id) [{start}...{end}]"


def fetch_bulk(client: SanityClient, limit: int | None = None) -> List[Document]:
    limit = limit or yaml_config.fetch.bulk_limit
    return list(client.fetch(BULK_QUERY.format(limit=limit)))


def fetch_paged(
    client: SanityClient, page_size: int | None = None, show_progress: bool = True
) -> List[Document]:
    """
    Page through the dataset ordered by _id, stopping at the first page that
    comes back shorter than `page_size`.
    """
    page_size = page_size or yaml_config.fetch.page_size
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    docs: List[Document] = []
    offset = 0
    with tqdm(desc="Fetching documents", unit="doc", disable=not show_progress) as bar:
        while True:
            batch = client.fetch(
                PAGE_QUERY.format(start=offset, end=offset + page_size)
            )
            docs.extend(batch)
            bar.update(len(batch))
            if len(batch) < page_size:
                break
            offset += page_size
    return docs


def fetch_all_documents(
    client: SanityClient,
    strategy: str | None = None,
    page_size: int | None = None,
    limit: int | None = None,
) -> List[Document]:
    strategy = strategy or yaml_config.fetch.strategy
    if strategy == "paged":
        docs = fetch_paged(client, page_size=page_size)
    elif strategy == "bulk":
        docs = fetch_bulk(client, limit=limit)
    else:
        raise ValueError(f"Unsupported fetch strategy: {strategy}")
    log.info("Fetched %d documents from dataset '%s'", len(docs), client.dataset)
    return docs
