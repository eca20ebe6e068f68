"""Elasticsearch client construction."""

from __future__ import annotations

from elasticsearch import Elasticsearch

from core.config import LoaderConfig


def create_elastic_client(config: LoaderConfig) -> Elasticsearch:
    """Create an Elasticsearch client from runtime configuration.

    Args:
        config: Runtime config with endpoint and optional credentials.

    Returns:
        Configured client. Sniffing is left disabled.

    Raises:
        ConfigError: If ELASTIC_ENDPOINT is not set.
    """
    client_kwargs: dict[str, object] = {
        "hosts": [config.require_endpoint()],
        "request_timeout": config.request_timeout,
    }
    if config.elastic_username and config.elastic_password:
        client_kwargs["basic_auth"] = (config.elastic_username, config.elastic_password)
    return Elasticsearch(**client_kwargs)
