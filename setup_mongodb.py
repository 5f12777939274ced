"""
MongoDB Setup Script
Tests connection and initializes database with collections and indexes.
"""
import asyncio
from src.repositories import db_manager
from src.config import settings

COLLECTIONS = ["contacts", "tasks", "notes", "voice_logs", "contact_enrichments"]


async def setup_mongodb():
    """Initialize the MongoDB database with collections and indexes."""
    print("🔄 Connecting to MongoDB...")
    print(f"   Database: {settings.mongodb_database}")
    print()

    try:
        await db_manager.connect()
        await db_manager.client.admin.command("ping")
        print("✅ Connection successful!")
        print()

        db = db_manager.database

        existing_collections = await db.list_collection_names()
        print(f"📦 Existing collections: {existing_collections or 'None'}")
        print()

        print("🔨 Creating indexes...")
        await db_manager.create_indexes()
        print("✅ Indexes created successfully!")
        print()

        print("📊 Verifying indexes:")
        total = 0
        for name in COLLECTIONS:
            indexes = await db[name].index_information()
            total += len(indexes)
            print(f"   {name}: {len(indexes)} indexes")
            for idx_name in indexes:
                print(f"      - {idx_name}")

        print()
        print("🎉 MongoDB setup complete!")
        print()
        print("📝 Summary:")
        print(f"   ✅ Database: {settings.mongodb_database}")
        print(f"   ✅ Collections: {', '.join(COLLECTIONS)}")
        print(f"   ✅ Indexes: {total} total")
        print()

    except Exception as e:
        print(f"❌ Error: {e}")
        print()
        print("💡 Troubleshooting:")
        print("   1. Check MONGODB_URI in your .env")
        print("   2. Verify your IP is allowed to reach the cluster")
        print("   3. Ensure the server is running")
        raise

    finally:
        await db_manager.disconnect()
        print("👋 Disconnected from MongoDB")


if __name__ == "__main__":
    asyncio.run(setup_mongodb())
