"""Unit tests for batched bulk submission."""

from __future__ import annotations

from elasticsearch import ConnectionError as ElasticConnectionError
import pytest

from core.errors import BatchCommitError
from store.bulk_submitter import BulkSubmitter
from tests.fake_elastic import FakeElasticsearch


def _document(doc_id: str) -> dict[str, object]:
    return {"id": doc_id, "humidity_percentage": 50}


def test_flush_commits_queued_documents_in_batches() -> None:
    """Five documents at batch size two commit as three batches."""
    client = FakeElasticsearch()
    with BulkSubmitter(client, "weather", workers=2, batch_size=2) as submitter:
        for index in range(5):
            submitter.enqueue(f"doc-{index}", _document(f"doc-{index}"))
        results = submitter.flush()

    assert [result.operation_count for result in results] == [2, 2, 1]
    assert sum(result.created for result in results) == 5
    assert len(client.bulk_calls) == 3


def test_enqueue_sends_create_operations_keyed_by_id() -> None:
    """Every action is a create into the target index with the document id."""
    client = FakeElasticsearch()
    with BulkSubmitter(client, "weather", batch_size=10) as submitter:
        submitter.enqueue("doc-1", _document("doc-1"))
        submitter.flush()

    assert client.actions == [{"create": {"_index": "weather", "_id": "doc-1"}}]
    assert client.documents == [_document("doc-1")]


def test_enqueue_does_not_submit_below_batch_size() -> None:
    """Documents wait in the queue until the batch fills or flush runs."""
    client = FakeElasticsearch()
    with BulkSubmitter(client, "weather", batch_size=10) as submitter:
        submitter.enqueue("doc-1", _document("doc-1"))

        assert client.bulk_calls == []

        submitter.flush()


def test_flush_counts_duplicate_ids_without_failing() -> None:
    """Create conflicts from earlier runs are counted, not fatal."""
    client = FakeElasticsearch(existing_ids={"doc-1"})
    with BulkSubmitter(client, "weather", batch_size=10) as submitter:
        submitter.enqueue("doc-1", _document("doc-1"))
        submitter.enqueue("doc-2", _document("doc-2"))
        results = submitter.flush()

    assert results[0].duplicates == 1
    assert results[0].created == 1


def test_flush_raises_for_rejected_items() -> None:
    """Item failures other than conflicts fail the batch."""
    client = FakeElasticsearch(rejected_ids={"doc-2"})
    with BulkSubmitter(client, "weather", batch_size=10) as submitter:
        submitter.enqueue("doc-1", _document("doc-1"))
        submitter.enqueue("doc-2", _document("doc-2"))

        with pytest.raises(BatchCommitError) as error_info:
            submitter.flush()

    assert error_info.value.batch_id == 1


def test_flush_raises_for_transport_failure() -> None:
    """A batch-level transport failure is surfaced as a commit error."""
    client = FakeElasticsearch(bulk_error=ElasticConnectionError("connection refused"))
    with BulkSubmitter(client, "weather", batch_size=10) as submitter:
        submitter.enqueue("doc-1", _document("doc-1"))

        with pytest.raises(BatchCommitError):
            submitter.flush()


def test_enqueue_raises_after_failed_batch() -> None:
    """Once a batch has failed, the producer is stopped on its next enqueue."""
    client = FakeElasticsearch(bulk_error=ElasticConnectionError("connection refused"))
    with BulkSubmitter(client, "weather", batch_size=1) as submitter:
        submitter.enqueue("doc-1", _document("doc-1"))
        with pytest.raises(BatchCommitError):
            submitter.flush()

        with pytest.raises(BatchCommitError):
            submitter.enqueue("doc-2", _document("doc-2"))


def test_flush_with_empty_queue_returns_no_results() -> None:
    """Flushing an empty submitter sends nothing."""
    client = FakeElasticsearch()
    with BulkSubmitter(client, "weather") as submitter:
        assert submitter.flush() == []

    assert client.bulk_calls == []


def test_submitter_rejects_invalid_pool_settings() -> None:
    """Worker count and batch size must be positive."""
    with pytest.raises(ValueError):
        BulkSubmitter(FakeElasticsearch(), "weather", workers=0)


def test_flush_wraps_unexpected_bulk_errors() -> None:
    """Non-transport failures still surface as commit errors."""
    client = FakeElasticsearch(bulk_error=ValueError("bad response"))
    with BulkSubmitter(client, "weather", batch_size=10) as submitter:
        submitter.enqueue("doc-1", _document("doc-1"))

        with pytest.raises(BatchCommitError) as error_info:
            submitter.flush()

    assert error_info.value.batch_id == 1
    assert isinstance(error_info.value.__cause__, ValueError)


def test_enqueue_raises_after_unexpected_bulk_error() -> None:
    """An unexpected worker failure also stops the producer."""
    client = FakeElasticsearch(bulk_error=ValueError("bad response"))
    with BulkSubmitter(client, "weather", batch_size=1) as submitter:
        submitter.enqueue("doc-1", _document("doc-1"))
        with pytest.raises(BatchCommitError):
            submitter.flush()

        with pytest.raises(BatchCommitError):
            submitter.enqueue("doc-2", _document("doc-2"))

