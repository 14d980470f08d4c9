"""
Integration tests for PostgresMetadataRepository.

Tests repository operations against a real PostgreSQL database.
Requires PostgreSQL to be running at DATABASE_URL.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from psycopg_pool import ConnectionPool

from src.adapters.repository.postgres import PostgresMetadataRepository, run_migrations
from src.config.settings import get_settings

pytestmark = pytest.mark.integration

DOMAIN = "alice.farcaster.celo"
OWNER = "0xd8da6bf26964af9d7eed9e03e53415d37aa96045"
TX_HASH = "0x" + "ab" * 32


def metadata_for(owner: str = OWNER, bio: str = "hi") -> dict:
    return {
        "name": DOMAIN,
        "attributes": [
            {"trait_type": "Domain", "value": DOMAIN},
            {"trait_type": "Owner", "value": owner},
            {"trait_type": "Bio", "value": bio},
        ],
    }


@pytest.fixture(scope="module")
def pool() -> ConnectionPool:
    """Create connection pool and schema for integration tests."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
    )
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def repository(pool: ConnectionPool) -> PostgresMetadataRepository:
    """Create repository instance for each test."""
    return PostgresMetadataRepository(pool)


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> None:
    """Clean domain_metadata table before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM domain_metadata")
        conn.commit()
    yield


def fetch_row(pool: ConnectionPool, domain: str = DOMAIN) -> tuple:
    with pool.connection() as conn:
        return conn.execute(
            "SELECT owner, state, transaction_hash, minted_at FROM domain_metadata "
            "WHERE domain = %s",
            (domain,),
        ).fetchone()


class TestSavePending:
    """Tests for save_pending method."""

    def test_new_domain_stored(self, repository: PostgresMetadataRepository, pool) -> None:
        """Preparing an unknown domain stores a PENDING record."""
        assert repository.save_pending(DOMAIN, OWNER, metadata_for()) is True

        owner, state, tx_hash, minted_at = fetch_row(pool)
        assert owner == OWNER
        assert state == "PENDING"
        assert tx_hash is None
        assert minted_at is None

    def test_pending_record_overwritten(self, repository: PostgresMetadataRepository) -> None:
        """A newer preparation replaces a pending record."""
        repository.save_pending(DOMAIN, OWNER, metadata_for(bio="old"))
        assert repository.save_pending(DOMAIN, OWNER, metadata_for(bio="new")) is True

        stored = repository.get_metadata(DOMAIN)
        assert stored["attributes"][2]["value"] == "new"

    def test_minted_record_not_overwritten(self, repository: PostgresMetadataRepository) -> None:
        """A minted domain rejects new preparations."""
        repository.mark_minted(DOMAIN, TX_HASH, metadata_for(bio="minted"))

        assert repository.save_pending(DOMAIN, OWNER, metadata_for(bio="again")) is False
        assert repository.get_metadata(DOMAIN)["attributes"][2]["value"] == "minted"


class TestMarkMinted:
    """Tests for mark_minted method."""

    def test_pending_becomes_minted(self, repository: PostgresMetadataRepository, pool) -> None:
        """A pending record moves forward to MINTED with its transaction hash."""
        repository.save_pending(DOMAIN, OWNER, metadata_for())
        repository.mark_minted(DOMAIN, TX_HASH, metadata_for())

        _, state, tx_hash, minted_at = fetch_row(pool)
        assert state == "MINTED"
        assert tx_hash == TX_HASH
        assert minted_at is not None

    def test_mint_without_preparation(self, repository: PostgresMetadataRepository, pool) -> None:
        """A mint recorded without a prior preparation is inserted directly."""
        repository.mark_minted(DOMAIN, TX_HASH, metadata_for())

        owner, state, _, _ = fetch_row(pool)
        assert owner == OWNER
        assert state == "MINTED"

    def test_second_mint_ignored(self, repository: PostgresMetadataRepository, pool) -> None:
        """A minted record keeps its original transaction hash."""
        repository.mark_minted(DOMAIN, TX_HASH, metadata_for())
        repository.mark_minted(DOMAIN, "0x" + "cd" * 32, metadata_for())

        _, _, tx_hash, _ = fetch_row(pool)
        assert tx_hash == TX_HASH


class TestGetMetadata:
    """Tests for get_metadata method."""

    def test_missing_domain(self, repository: PostgresMetadataRepository) -> None:
        """Unknown domains return None."""
        assert repository.get_metadata("nobody.farcaster.celo") is None

    def test_round_trips_json(self, repository: PostgresMetadataRepository) -> None:
        """Stored JSONB comes back as the same document."""
        document = metadata_for(bio='quotes " and \\ unicode ✓')
        repository.save_pending(DOMAIN, OWNER, document)
        assert repository.get_metadata(DOMAIN) == document


class TestConcurrentPreparation:
    """Tests for concurrent writes against a minted record."""

    def test_concurrent_preparations_never_replace_mint(
        self, repository: PostgresMetadataRepository
    ) -> None:
        """Racing preparations after a mint all fail."""
        repository.mark_minted(DOMAIN, TX_HASH, metadata_for(bio="minted"))

        with ThreadPoolExecutor(max_workers=10) as executor:
            results = list(
                executor.map(
                    lambda i: repository.save_pending(DOMAIN, OWNER, metadata_for(bio=str(i))),
                    range(10),
                )
            )

        assert results == [False] * 10
        assert repository.get_metadata(DOMAIN)["attributes"][2]["value"] == "minted"
