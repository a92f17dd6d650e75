"""
Back-fill the type field on chat messages stored before it existed
Messages without a recipient become "group", all others "private".
Run with: python -m migrations.add_message_type [data_dir]
"""

import sys

from resident_portal.config import DATA_DIR
from resident_portal.domain.messages.repository import MessageRepository
from resident_portal.json_store import JsonStore, StorageError


def add_message_type(store: JsonStore) -> int:
    """Set the missing message types, returns how many messages changed"""
    print("🚀 Starting message type back-fill...")

    messages = MessageRepository(store)
    with store.lock(messages.collection):
        records = messages.all()
        print(f"📋 Found {len(records)} messages")

        updated_count = 0
        for message in records:
            if message.get("type"):
                continue
            message["type"] = "group" if message.get("recipientId") is None else "private"
            updated_count += 1

        if updated_count:
            messages.save_all(records)

    print(f"✅ Updated {updated_count} messages, {len(records) - updated_count} already had a type")
    return updated_count


if __name__ == "__main__":
    data_dir = sys.argv[1] if len(sys.argv) > 1 else DATA_DIR
    try:
        add_message_type(JsonStore(data_dir, mode="file"))
    except StorageError as e:
        print(f"❌ Migration failed: {e}")
        sys.exit(1)
