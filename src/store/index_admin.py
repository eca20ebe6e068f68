"""Index lifecycle administration.

This module wraps the one-shot index calls the loader needs: existence
checks, creation from a static mapping document, and deletion.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from elasticsearch import ApiError, TransportError

from core.errors import IndexAdminError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class IndexAdmin:
    """Thin index lifecycle client with loader error semantics."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def index_exists(self, index_name: str) -> bool:
        """Return whether the index exists.

        Raises:
            IndexAdminError: If the existence check fails.
        """
        try:
            return bool(self._client.indices.exists(index=index_name))
        except (ApiError, TransportError) as error:
            raise IndexAdminError(
                f"Failed to check whether index '{index_name}' exists: {error}."
            ) from error

    def create_index(self, index_name: str, mapping: dict[str, Any]) -> None:
        """Create the index from a mapping document.

        Raises:
            IndexAdminError: If creation fails or is not acknowledged.
        """
        try:
            response = self._client.indices.create(
                index=index_name,
                mappings=mapping.get("mappings"),
                settings=mapping.get("settings"),
            )
        except (ApiError, TransportError) as error:
            raise IndexAdminError(f"Failed to create index '{index_name}': {error}.") from error
        if not response.get("acknowledged"):
            raise IndexAdminError(f"Create index '{index_name}' was not acknowledged.")
        _LOGGER.info("index_created", index=index_name)

    def delete_index(self, index_name: str) -> None:
        """Delete the index.

        Raises:
            IndexAdminError: If deletion fails or is not acknowledged.
        """
        try:
            response = self._client.indices.delete(index=index_name)
        except (ApiError, TransportError) as error:
            raise IndexAdminError(f"Failed to delete index '{index_name}': {error}.") from error
        if not response.get("acknowledged"):
            raise IndexAdminError(f"Delete index '{index_name}' was not acknowledged.")
        _LOGGER.info("index_deleted", index=index_name)

    def ensure_index(self, index_name: str, mapping_path: Path) -> bool:
        """Create the index from ``mapping_path`` unless it already exists.

        Returns:
            True if the index was created by this call.
        """
        if self.index_exists(index_name):
            _LOGGER.info("index_already_exists", index=index_name)
            return False
        self.create_index(index_name, load_mapping(mapping_path))
        return True


def load_mapping(mapping_path: Path) -> dict[str, Any]:
    """Load an index mapping document from JSON.

    Raises:
        IndexAdminError: If the file is missing or not a JSON object.
    """
    try:
        payload = json.loads(mapping_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise IndexAdminError(
            f"Failed to read mapping document {mapping_path}: {error}. "
            "Set WEATHER_MAPPING_PATH or pass --mapping."
        ) from error
    except json.JSONDecodeError as error:
        raise IndexAdminError(
            f"Failed to parse mapping document {mapping_path}: {error.msg}."
        ) from error
    if not isinstance(payload, dict):
        raise IndexAdminError(
            f"Invalid mapping document {mapping_path}: expected a JSON object."
        )
    return payload
