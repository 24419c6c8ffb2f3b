from __future__ import annotations

from typing import Any, Dict, List, Optional

import orjson
import requests

from common.config import yaml_config
from common.logger import get_logger
from documents.document_models import Document

log = get_logger(__name__)


class DatasetApiError(RuntimeError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}: {resp.text[:200]}"
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict):
        return err.get("description") or err.get("type") or str(err)
    if isinstance(body, dict) and (body.get("message") or err):
        return str(body.get("message") or err)
    return f"HTTP {resp.status_code}"


class SanityClient:
    """
    Minimal client for the Content Lake HTTP API: GROQ queries and mutations
    against one dataset.
    """

    def __init__(
        self,
        project_id: str,
        dataset: str,
        token: str | None = None,
        api_version: str | None = None,
        use_cdn: bool | None = None,
        timeout: int | None = None,
        session: requests.Session | None = None,
    ):
        self.project_id = project_id
        self.dataset = dataset
        self.api_version = api_version or yaml_config.api.api_version
        self.use_cdn = yaml_config.api.use_cdn if use_cdn is None else use_cdn
        self.timeout = timeout or yaml_config.api.timeout
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = yaml_config.api.user_agent
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    @property
    def base_url(self) -> str:
        host = "apicdn.sanity.io" if self.use_cdn else "api.sanity.io"
        version = self.api_version.lstrip("v")
        return f"https://{self.project_id}.{host}/v{version}"

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        resp = self._session.request(
            method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
        )
        if not resp.ok:
            raise DatasetApiError(_error_message(resp), resp.status_code)
        return resp.json()

    def fetch(self, query: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Run a GROQ query and return its `result`."""
        qs: Dict[str, Any] = {"query": query}
        for name, value in (params or {}).items():
            qs[f"${name}"] = orjson.dumps(value).decode()
        log.debug("GROQ %s", query)
        return self._request("GET", f"/data/query/{self.dataset}", params=qs)["result"]

    def mutate(
        self, mutations: List[Dict[str, Any]], visibility: str = "sync"
    ) -> Dict[str, Any]:
        body = self._request(
            "POST",
            f"/data/mutate/{self.dataset}",
            params={"returnIds": "true", "visibility": visibility},
            json={"mutations": mutations},
        )
        results = body.get("results", [])
        return {
            "transactionId": body.get("transactionId"),
            "documentIds": [r["id"] for r in results if "id" in r],
            "results": results,
        }

    def transaction(self) -> "Transaction":
        return Transaction(self)

    def patch(
        self,
        document_id: str,
        set: Optional[Dict[str, Any]] = None,
        unset: Optional[List[str]] = None,
    ) -> "Patch":
        return Patch(self, document_id, set=set, unset=unset)


class Patch:
    def __init__(
        self,
        client: SanityClient,
        document_id: str,
        set: Optional[Dict[str, Any]] = None,
        unset: Optional[List[str]] = None,
    ):
        self._client = client
        self.document_id = document_id
        self.set = set or {}
        self.unset = unset or []

    def serialize(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"id": self.document_id}
        if self.set:
            body["set"] = self.set
        if self.unset:
            body["unset"] = self.unset
        return {"patch": body}

    def commit(self, visibility: str = "sync") -> Dict[str, Any]:
        """Commit this patch on its own; `async` returns before it is queryable."""
        return self._client.mutate([self.serialize()], visibility=visibility)


class Transaction:
    """Mutations collected here are applied all-or-nothing by `commit`."""

    def __init__(self, client: SanityClient):
        self._client = client
        self.mutations: List[Dict[str, Any]] = []

    def create_if_not_exists(self, document: Document) -> "Transaction":
        self.mutations.append({"createIfNotExists": document})
        return self

    def patch(
        self,
        document_id: str,
        set: Optional[Dict[str, Any]] = None,
        unset: Optional[List[str]] = None,
    ) -> "Transaction":
        self.mutations.append(
            Patch(self._client, document_id, set=set, unset=unset).serialize()
        )
        return self

    def commit(self) -> Dict[str, Any]:
        log.info("Committing transaction with %d mutations", len(self.mutations))
        return self._client.mutate(self.mutations, visibility="sync")
