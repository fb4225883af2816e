import os
import uuid
from collections.abc import Callable, Generator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import psycopg
import pytest

from docvault.config.settings import Settings
from docvault.database.connection import apply_schema, close_pool, get_connection, init_pool
from docvault.database.repositories.document_repository import DocumentRepository
from docvault.documents.models import Document


def _test_settings() -> Settings:
    if "DB_DATABASE" in os.environ:
        return Settings()
    os.environ["DB_DATABASE"] = "docvault_test"
    try:
        return Settings()
    finally:
        del os.environ["DB_DATABASE"]


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        apply_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    """Document IDs to delete after the test; records go with them."""
    cleanup: list[str] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for document_id in cleanup:
                cur.execute("DELETE FROM documents WHERE id = %s", (document_id,))
        conn.commit()


@pytest.fixture
def make_document() -> Callable[..., Document]:
    def _make(
        original_name: str = "report.txt",
        mime_type: str = "text/plain",
        size: int = 5,
        uploaded_at: datetime | None = None,
    ) -> Document:
        storage_key = f"{uuid.uuid4().hex}{Path(original_name).suffix}"
        return Document(
            id=str(uuid.uuid4()),
            filename=storage_key,
            original_name=original_name,
            mime_type=mime_type,
            size=size,
            storage_key=storage_key,
            uploaded_at=uploaded_at or datetime.now(timezone.utc),
        )

    return _make


@pytest.fixture
def seed_document(
    integration_pool: None,
    integration_cleanup: list[str],
    make_document: Callable[..., Document],
) -> Document:
    document = make_document()
    DocumentRepository().create_with_record(document)
    integration_cleanup.append(document.id)
    return document


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path / "files"
