"""Batched bulk submission of create operations.

This module queues measurement documents and commits them to the index
in bounded batches on a fixed pool of worker threads. Every batch yields
an explicit ``BatchResult`` (or ``BatchCommitError``) that ``flush``
hands back to the caller; nothing exits the process from a worker.

Create operations fail for ids that already exist in the index. Those
items are counted as duplicates, which keeps re-runs over the same files
safe. Any other item failure fails its batch.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
import threading
from typing import Any

from elasticsearch import ApiError, TransportError

from core.constants import (
    BULK_OPERATION_TYPE,
    CONFLICT_STATUS_CODE,
    DEFAULT_BULK_BATCH_SIZE,
    DEFAULT_BULK_WORKERS,
)
from core.errors import BatchCommitError
from core.logging_config import get_logger
from core.types import BatchResult

_LOGGER = get_logger(__name__)
_MAX_LOGGED_ITEM_ERRORS = 5


class BulkSubmitter:
    """Thread-safe bulk create queue backed by a worker pool."""

    def __init__(
        self,
        client: Any,
        index_name: str,
        workers: int = DEFAULT_BULK_WORKERS,
        batch_size: int = DEFAULT_BULK_BATCH_SIZE,
        max_pending_batches: int | None = None,
    ) -> None:
        if workers < 1 or batch_size < 1:
            raise ValueError("workers and batch_size must be >= 1")
        self._client = client
        self._index_name = index_name
        self._batch_size = batch_size
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="bulk")
        self._slots = threading.BoundedSemaphore(max_pending_batches or workers * 2)
        self._lock = threading.Lock()
        self._pending: list[tuple[str, dict[str, Any]]] = []
        self._in_flight: list[Future[BatchResult]] = []
        self._batch_sequence = 0
        self._failure: BatchCommitError | None = None

    @property
    def index_name(self) -> str:
        return self._index_name

    def enqueue(self, doc_id: str, document: dict[str, Any]) -> None:
        """Queue one create operation.

        Dispatches a batch once the queue reaches the batch size. Blocks
        only while the maximum number of batches is already in flight.

        Raises:
            BatchCommitError: If an earlier batch has already failed.
        """
        self._raise_if_failed()
        batch: list[tuple[str, dict[str, Any]]] = []
        with self._lock:
            self._pending.append((doc_id, document))
            if len(self._pending) >= self._batch_size:
                batch = self._take_pending()
        if batch:
            self._dispatch(batch)

    def flush(self) -> list[BatchResult]:
        """Submit queued operations and wait for every outstanding batch.

        Returns:
            Results of the batches committed since the previous flush.

        Raises:
            BatchCommitError: If any of those batches failed.
        """
        with self._lock:
            batch = self._take_pending()
        if batch:
            self._dispatch(batch)
        with self._lock:
            futures = self._in_flight
            self._in_flight = []
        results: list[BatchResult] = []
        errors: list[BatchCommitError] = []
        for future in futures:
            try:
                results.append(future.result())
            except BatchCommitError as error:
                errors.append(error)
        if errors:
            with self._lock:
                if self._failure is None:
                    self._failure = errors[0]
            _LOGGER.error(
                "bulk_flush_failed",
                index=self._index_name,
                failed_batches=len(errors),
                committed_batches=len(results),
            )
            raise errors[0]
        return sorted(results, key=lambda result: result.batch_id)

    def close(self) -> None:
        """Stop the worker pool after outstanding batches finish."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "BulkSubmitter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _take_pending(self) -> list[tuple[str, dict[str, Any]]]:
        batch = self._pending
        self._pending = []
        return batch

    def _dispatch(self, batch: list[tuple[str, dict[str, Any]]]) -> None:
        self._slots.acquire()
        with self._lock:
            self._batch_sequence += 1
            batch_id = self._batch_sequence
            future = self._executor.submit(self._commit, batch_id, batch)
            self._in_flight.append(future)
        future.add_done_callback(self._on_batch_done)

    def _on_batch_done(self, future: Future[BatchResult]) -> None:
        self._slots.release()
        error = future.exception()
        if isinstance(error, BatchCommitError):
            with self._lock:
                if self._failure is None:
                    self._failure = error

    def _raise_if_failed(self) -> None:
        with self._lock:
            failure = self._failure
        if failure is not None:
            raise failure

    def _commit(self, batch_id: int, batch: list[tuple[str, dict[str, Any]]]) -> BatchResult:
        """Run one batch on a worker; every failure surfaces as BatchCommitError."""
        try:
            return self._send_batch(batch_id, batch)
        except BatchCommitError:
            raise
        except Exception as error:
            _LOGGER.error(
                "bulk_batch_failed",
                index=self._index_name,
                batch_id=batch_id,
                operations=len(batch),
                error=repr(error),
            )
            raise BatchCommitError(
                f"Bulk batch {batch_id} to index '{self._index_name}' failed: {error!r}.",
                batch_id=batch_id,
            ) from error

    def _send_batch(
        self, batch_id: int, batch: list[tuple[str, dict[str, Any]]]
    ) -> BatchResult:
        """Send one batch through the bulk API and inspect every item."""
        operations: list[dict[str, Any]] = []
        for doc_id, document in batch:
            operations.append({BULK_OPERATION_TYPE: {"_index": self._index_name, "_id": doc_id}})
            operations.append(document)
        try:
            response = self._client.bulk(operations=operations)
        except (ApiError, TransportError) as error:
            _LOGGER.error(
                "bulk_batch_failed",
                index=self._index_name,
                batch_id=batch_id,
                operations=len(batch),
                error=str(error),
            )
            raise BatchCommitError(
                f"Bulk batch {batch_id} to index '{self._index_name}' failed: {error}.",
                batch_id=batch_id,
            ) from error
        result = _summarize_items(batch_id, len(batch), response)
        if result.duplicates:
            _LOGGER.warning(
                "bulk_duplicate_documents",
                index=self._index_name,
                batch_id=batch_id,
                duplicates=result.duplicates,
            )
        if not result.succeeded:
            _log_item_errors(self._index_name, batch_id, response)
            raise BatchCommitError(
                f"Bulk batch {batch_id} to index '{self._index_name}' rejected "
                f"{result.failures} of {result.operation_count} documents.",
                batch_id=batch_id,
            )
        _LOGGER.info(
            "bulk_batch_committed",
            index=self._index_name,
            batch_id=batch_id,
            operations=result.operation_count,
            created=result.created,
        )
        return result


def _summarize_items(batch_id: int, operation_count: int, response: Any) -> BatchResult:
    """Count created, duplicate, and failed items of a bulk response."""
    created = 0
    duplicates = 0
    failures = 0
    for item in _response_items(response):
        status = item.get("status")
        if item.get("error") is None and isinstance(status, int) and status < 300:
            created += 1
        elif status == CONFLICT_STATUS_CODE:
            duplicates += 1
        else:
            failures += 1
    unreported = operation_count - created - duplicates - failures
    return BatchResult(
        batch_id=batch_id,
        operation_count=operation_count,
        created=created,
        duplicates=duplicates,
        failures=failures + max(unreported, 0),
    )


def _response_items(response: Any) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    for entry in response.get("items", []):
        if isinstance(entry, dict):
            items.append(dict(entry.get(BULK_OPERATION_TYPE, {})))
    return items


def _log_item_errors(index_name: str, batch_id: int, response: Any) -> None:
    logged = 0
    for item in _response_items(response):
        if item.get("status") == CONFLICT_STATUS_CODE or item.get("error") is None:
            continue
        _LOGGER.error(
            "bulk_item_failed",
            index=index_name,
            batch_id=batch_id,
            document_id=item.get("_id"),
            status=item.get("status"),
            error=item.get("error"),
        )
        logged += 1
        if logged >= _MAX_LOGGED_ITEM_ERRORS:
            break
