"""
MongoDB Repository Tests
Query shapes and guarded writes, against a mocked Motor collection.
"""
import pytest
import datetime as dt
from bson import ObjectId
from unittest.mock import AsyncMock, MagicMock

from src.models.contact import Contact
from src.models.enrichment import ContactEnrichment, EnrichmentStatus
from src.repositories import ContactRepository, EnrichmentRepository, VoiceInteractionRepository


pytestmark = pytest.mark.asyncio

NOW = dt.datetime(2024, 1, 12, 9, 0, tzinfo=dt.UTC)
OID = ObjectId("65a0c0ffee0000000000beef")


@pytest.fixture
def collection():
    collection = MagicMock()
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=OID))
    collection.find_one = AsyncMock(return_value=None)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.count_documents = AsyncMock(return_value=0)

    cursor = MagicMock()
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    return collection


@pytest.fixture
def database(collection):
    database = MagicMock()
    database.__getitem__.return_value = collection
    return database


def enrichment_doc(**overrides) -> dict:
    doc = {
        "_id": OID,
        "contact_id": "c1",
        "enrichment_status": "processing",
        "cycle": 1,
        "created_at": NOW,
        "updated_at": NOW,
    }
    doc.update(overrides)
    return doc


class TestBaseRepository:

    async def test_create_populates_id_without_computed_fields(self, database, collection):
        repo = ContactRepository(database)

        created = await repo.create(Contact(first_name="Ada", last_name="Lovelace"))

        stored = collection.insert_one.call_args.args[0]
        assert created.id == str(OID)
        assert "full_name" not in stored
        assert "_id" not in stored
        assert stored["first_name"] == "Ada"
        assert isinstance(stored["created_at"], dt.datetime)

    async def test_find_by_malformed_id_matches_nothing(self, database, collection):
        repo = ContactRepository(database)

        assert await repo.find_by_id("not-an-object-id") is None
        collection.find_one.assert_not_called()

    async def test_update_fields_is_single_set(self, database, collection):
        collection.find_one_and_update.return_value = {
            "_id": OID, "first_name": "Ada", "last_name": "King", "created_at": NOW, "updated_at": NOW,
        }
        repo = ContactRepository(database)

        updated = await repo.update_fields(str(OID), {"last_name": "King", "created_at": NOW})

        query, update = collection.find_one_and_update.call_args.args
        assert query == {"_id": OID}
        assert update["$set"]["last_name"] == "King"
        assert "created_at" not in update["$set"]
        assert "updated_at" in update["$set"]
        assert updated.last_name == "King"

    async def test_list_all_has_no_limit(self, database, collection):
        repo = ContactRepository(database)

        await repo.list_all(sort=[("created_at", -1)])

        cursor = collection.find.return_value
        cursor.limit.assert_called_with(0)
        cursor.sort.assert_called_with([("created_at", -1)])
        cursor.to_list.assert_awaited_with(length=None)

    async def test_voice_log_is_append_only(self, database, collection):
        repo = VoiceInteractionRepository(database)

        with pytest.raises(RuntimeError, match="append-only"):
            await repo.update_fields(str(OID), {"intent": "query"})
        collection.find_one_and_update.assert_not_called()


class TestEnrichmentRepository:

    async def test_no_unguarded_document_update(self, database):
        assert not hasattr(EnrichmentRepository(database), "update")

    async def test_compare_and_set_guards_status_and_cycle(self, database, collection):
        collection.find_one_and_update.return_value = enrichment_doc(
            enrichment_status="complete", last_enriched_at=NOW
        )
        repo = EnrichmentRepository(database)

        updated = await repo.compare_and_set(
            str(OID),
            EnrichmentStatus.PROCESSING,
            1,
            {"enrichment_status": EnrichmentStatus.COMPLETE, "last_enriched_at": NOW},
        )

        query = collection.find_one_and_update.call_args.args[0]
        assert query == {"_id": OID, "enrichment_status": "processing", "cycle": 1}
        assert isinstance(updated, ContactEnrichment)
        assert updated.enrichment_status == EnrichmentStatus.COMPLETE

    async def test_compare_and_set_miss_returns_none(self, database, collection):
        repo = EnrichmentRepository(database)

        result = await repo.compare_and_set(
            str(OID), EnrichmentStatus.PROCESSING, 3, {"enrichment_status": EnrichmentStatus.FAILED}
        )

        assert result is None

    async def test_find_stale_query(self, database, collection):
        collection.find.return_value.to_list.return_value = [
            enrichment_doc(enrichment_status="complete", last_enriched_at=NOW)
        ]
        repo = EnrichmentRepository(database)

        records = await repo.find_stale(NOW, limit=10)

        collection.find.assert_called_with({
            "enrichment_status": "complete",
            "last_enriched_at": {"$lt": NOW},
        })
        assert records[0].contact_id == "c1"
        assert records[0].id == str(OID)

    async def test_find_stuck_query(self, database, collection):
        collection.find.return_value.to_list.return_value = [
            enrichment_doc(enrichment_status="processing")
        ]
        repo = EnrichmentRepository(database)

        records = await repo.find_stuck(NOW, limit=10)

        collection.find.assert_called_with({
            "enrichment_status": "processing",
            "updated_at": {"$lt": NOW},
        })
        assert records[0].enrichment_status == EnrichmentStatus.PROCESSING

    async def test_find_by_contact(self, database, collection):
        collection.find_one.return_value = enrichment_doc(enrichment_status="pending")
        repo = EnrichmentRepository(database)

        record = await repo.find_by_contact("c1")

        collection.find_one.assert_awaited_with({"contact_id": "c1"})
        assert record.enrichment_status == EnrichmentStatus.PENDING

    async def test_delete_by_contact(self, database, collection):
        repo = EnrichmentRepository(database)

        assert await repo.delete_by_contact("c1") == 1
        collection.delete_many.assert_awaited_with({"contact_id": "c1"})
