from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from common.config import yaml_config
from common.logger import get_logger
from documents.document_models import Document, MigrationPlan
from migrations.summary import format_plan
from store.fetch import fetch_all_documents
from store.sanity_client import SanityClient
from transforms.base import PER_DOCUMENT, DocumentTransform

log = get_logger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    TRANSFORMING = "transforming"
    SUMMARIZING = "summarizing"
    CANCELLED = "cancelled"
    COMMITTING = "committing"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class MigrationOutcome:
    status: str  # "noop" | "cancelled" | "success" | "failed"
    transaction_id: Optional[str] = None
    document_ids: List[str] = field(default_factory=list)
    error: Optional[str] = None


class MigrationRunner:
    """
    Runs one migration end to end:
      1) fetch every document with the read client
      2) plan patches with the transform (no-op documents drop out)
      3) show the summary and ask for confirmation
      4) build the write client and commit

    Transactional migrations commit placeholders and patches in one atomic
    transaction. Per-document migrations send each patch as its own async
    mutation from a thread pool: no ordering, and no rollback if some fail.

    Any exception is caught once in `run` and becomes a "failed" outcome.
    """

    def __init__(
        self,
        client: SanityClient,
        transform: DocumentTransform,
        confirm: Callable[[str], bool],
        write_client: Callable[[], SanityClient],
        fetch: Callable[[SanityClient], List[Document]] = fetch_all_documents,
        max_workers: int | None = None,
    ):
        self.client = client
        self.transform = transform
        self.confirm = confirm
        self.write_client = write_client
        self.fetch = fetch
        self.max_workers = max_workers or yaml_config.commit.max_workers
        self.state = RunState.IDLE
        self.history: List[RunState] = [self.state]

    def _enter(self, state: RunState) -> None:
        log.debug("%s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def run(self) -> MigrationOutcome:
        try:
            outcome = self._run()
        except Exception as e:
            log.error("Migration '%s' failed: %s", self.transform.name, e)
            log.debug("Traceback for failed migration", exc_info=True)
            self._enter(RunState.FAILED)
            return MigrationOutcome(status="failed", error=str(e))
        self._enter(RunState.REPORTING)
        self._enter(RunState.DONE)
        return outcome

    def _run(self) -> MigrationOutcome:
        self._enter(RunState.FETCHING)
        documents = self.fetch(self.client)

        self._enter(RunState.TRANSFORMING)
        plan = self.transform.plan(documents)
        log.info(
            "Planned %d patches and %d placeholders for '%s'",
            len(plan.patches),
            len(plan.placeholders),
            self.transform.name,
        )
        if plan.is_empty:
            return MigrationOutcome(status="noop")
        if plan.placeholders and self.transform.commit_mode == PER_DOCUMENT:
            # placeholders can only be created inside a transaction
            raise ValueError(
                f"'{self.transform.name}' needs placeholders and must use transaction commits"
            )

        self._enter(RunState.SUMMARIZING)
        if not self.confirm(format_plan(plan)):
            self._enter(RunState.CANCELLED)
            return MigrationOutcome(status="cancelled")

        self._enter(RunState.COMMITTING)
        client = self.write_client()
        if self.transform.commit_mode == PER_DOCUMENT:
            return self._commit_each(client, plan)
        return self._commit_transaction(client, plan)

    def _commit_transaction(
        self, client: SanityClient, plan: MigrationPlan
    ) -> MigrationOutcome:
        tx = client.transaction()
        for doc in plan.placeholders:
            tx.create_if_not_exists(doc)
        for p in plan.patches:
            tx.patch(p.document_id, set=p.set, unset=p.unset)
        res = tx.commit()
        log.info("Transaction %s committed", res["transactionId"])
        return MigrationOutcome(
            status="success",
            transaction_id=res["transactionId"],
            document_ids=list(res["documentIds"]),
        )

    def _commit_each(self, client: SanityClient, plan: MigrationPlan) -> MigrationOutcome:
        def _submit(p):
            return client.patch(p.document_id, set=p.set, unset=p.unset).commit(
                visibility="async"
            )

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(_submit, p) for p in plan.patches]
            results = [f.result() for f in futures]
        log.info("Submitted %d per-document patches", len(results))
        return MigrationOutcome(status="success", document_ids=plan.document_ids)
