"""
Pytest configuration and shared fixtures for template registry tests.

Provides mock clients, stores, services, and sample registry records.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from jose import jwt


TEST_TOKEN_SECRET = "test-build-token-secret"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_settings():
    """Settings object with test defaults (no real credentials)."""
    from template_registry.core.config import Settings
    return Settings(
        supabase_url="https://test.supabase.co",
        supabase_service_role_key="test-supabase-key",
        templates_table="templates",
        template_names_table="template_names",
        pipelines_table="pipelines",
        build_token_secret=TEST_TOKEN_SECRET,
        build_token_algorithm="HS256",
        build_token_scope="build",
    )


# ---------------------------------------------------------------------------
# Build tokens
# ---------------------------------------------------------------------------

@pytest.fixture
def make_build_token():
    """Factory for signed build tokens."""
    def _make(pipeline_id=12345, scope=("build",), secret=TEST_TOKEN_SECRET, **extra):
        claims = {"sub": "build-1", "scope": scope if isinstance(scope, str) else list(scope), **extra}
        if pipeline_id is not None:
            claims["pipelineId"] = pipeline_id
        return jwt.encode(claims, secret, algorithm="HS256")
    return _make


# ---------------------------------------------------------------------------
# Clients (mocked)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_supabase():
    """Mocked SupabaseClient with a chained table builder."""
    supabase_client = MagicMock()
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.insert.return_value = mock_table
    mock_table.update.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.order.return_value = mock_table
    mock_table.range.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])
    supabase_client.client.table.return_value = mock_table
    supabase_client.client.rpc.return_value.execute.return_value = MagicMock(data=[])
    return supabase_client, mock_table


# ---------------------------------------------------------------------------
# Sample records
# ---------------------------------------------------------------------------

@pytest.fixture
def template_row():
    """Stored row for template@1.7 owned by pipeline 12345."""
    return {
        "id": 123,
        "name": "template",
        "version": "1.7",
        "scm_uri": "github.com:12345:branchName",
        "maintainer": "foo@bar.com",
        "description": "test template",
        "template_url": "http://foo.bar",
        "labels": ["stable"],
        "config": {"image": "node:18", "steps": [{"test": "npm test"}]},
        "created_at": "2025-01-15T10:00:00Z",
    }


@pytest.fixture
def template(template_row):
    from template_registry.schemas.templates import Template
    return Template.from_row(template_row)


@pytest.fixture
def pipeline():
    from template_registry.schemas.templates import Pipeline
    return Pipeline(id=12345, scm_uri="github.com:12345:branchName")


@pytest.fixture
def publish_payload():
    return {
        "name": "template",
        "version": "1.7",
        "maintainer": "foo@bar.com",
        "description": "test template",
        "templateUrl": "http://foo.bar",
        "labels": ["stable", "latest"],
    }


@pytest.fixture
def publish_request(publish_payload):
    from template_registry.schemas.templates import PublishRequest
    return PublishRequest(**publish_payload)


# ---------------------------------------------------------------------------
# DB Stores (mocked)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_template_store():
    """Mocked TemplateStore with an empty registry."""
    store = MagicMock()
    store.find_by_name = AsyncMock(return_value=None)
    store.find_exact = AsyncMock(return_value=None)
    store.get = AsyncMock(return_value=None)
    store.list_templates = AsyncMock(return_value=[])
    store.create = AsyncMock()
    store.update_labels = AsyncMock()
    return store


@pytest.fixture
def mock_pipeline_store(pipeline):
    """Mocked PipelineStore that knows pipeline 12345."""
    store = MagicMock()
    store.get = AsyncMock(return_value=pipeline)
    return store
