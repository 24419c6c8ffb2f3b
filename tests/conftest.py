"""
Shared fixtures: an in-memory stand-in for SanityClient and a helper that
applies set/unset patches to a document so transforms can be re-run.
"""

import copy
import re
import threading
from typing import Any, Dict, List

import pytest

from documents.hash_utils import KeyAllocator

_SEGMENT = re.compile(r"\[(\d+)\]|\.?([^.\[\]]+)")


def parse_path(expr: str) -> List[Any]:
    return [int(i) if i else key for i, key in _SEGMENT.findall(expr)]


def apply_patch(document: Dict[str, Any], set=None, unset=()) -> Dict[str, Any]:
    """Return a copy of `document` with the patch's set/unset applied."""
    out = copy.deepcopy(document)
    for expr, value in (set or {}).items():
        *parents, last = parse_path(expr)
        node = out
        for seg in parents:
            node = node[seg]
        node[last] = copy.deepcopy(value)
    for expr in unset:
        *parents, last = parse_path(expr)
        node = out
        for seg in parents:
            node = node[seg]
        del node[last]
    return out


class FakeTransaction:
    def __init__(self, client):
        self._client = client
        self.mutations = []

    def create_if_not_exists(self, document):
        self.mutations.append({"createIfNotExists": document})
        return self

    def patch(self, document_id, set=None, unset=None):
        self.mutations.append(
            {"patch": {"id": document_id, "set": set or {}, "unset": unset or []}}
        )
        return self

    def commit(self):
        if self._client.fail_commit:
            raise RuntimeError("transaction rejected")
        self._client.committed.append(self.mutations)
        ids = [
            m.get("createIfNotExists", {}).get("_id") or m["patch"]["id"]
            for m in self.mutations
        ]
        return {"transactionId": "tx-1", "documentIds": ids, "results": []}


class FakePatch:
    def __init__(self, client, document_id, set=None, unset=None):
        self._client = client
        self.document_id = document_id
        self.set = set or {}
        self.unset = unset or []

    def commit(self, visibility="sync"):
        if self.document_id in self._client.fail_ids:
            raise RuntimeError(f"patch rejected for {self.document_id}")
        with self._client.lock:
            self._client.patched.append((self.document_id, self.set, self.unset, visibility))
        return {"transactionId": f"tx-{self.document_id}", "documentIds": [self.document_id]}


class FakeClient:
    dataset = "test"

    def __init__(self, documents=None, pages=None):
        self.documents = documents or []
        self.pages = list(pages or [])
        self.queries: List[str] = []
        self.committed: List[list] = []
        self.patched: List[tuple] = []
        self.fail_commit = False
        self.fail_fetch = False
        self.fail_ids = set()
        self.lock = threading.Lock()

    def fetch(self, query, params=None):
        self.queries.append(query)
        if self.fail_fetch:
            raise ConnectionError("dataset unreachable")
        if self.pages:
            return self.pages.pop(0)
        return list(self.documents)

    def transaction(self):
        return FakeTransaction(self)

    def patch(self, document_id, set=None, unset=None):
        return FakePatch(self, document_id, set=set, unset=unset)


@pytest.fixture
def allocator():
    return KeyAllocator()


@pytest.fixture
def fake_client():
    return FakeClient()
