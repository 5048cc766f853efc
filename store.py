# store.py

import json
import logging

from analytics import compute_analytics
from models import db, JournalBlob, TradeRecord, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = 'forexTrades'


class TradeStore:
    """Owns the in-memory record list and persists it after every change.

    ``persist`` receives the full list of records after each append or
    remove; the store never writes partial updates.
    """

    def __init__(self, records=None, persist=None):
        self._records = list(records or [])
        self._persist = persist

    def __len__(self):
        return len(self._records)

    def list(self):
        return list(self._records)

    def get(self, trade_id):
        for record in self._records:
            if record.id == trade_id:
                return record
        return None

    def append(self, record):
        if self.get(record.id) is not None:
            raise ValueError(f'Duplicate trade id: {record.id}')
        self._commit(self._records + [record])
        logger.info("Added trade %s (%s %s)", record.id, record.pair.value, record.result.value)
        return record

    def remove(self, trade_id):
        remaining = [r for r in self._records if r.id != trade_id]
        if len(remaining) == len(self._records):
            return False
        self._commit(remaining)
        logger.info("Deleted trade %s", trade_id)
        return True

    def recent(self, limit=5):
        # Newest first
        return list(reversed(self._records[-limit:])) if limit > 0 else []

    def snapshot(self):
        return compute_analytics(self._records)

    def _commit(self, records):
        # Memory only changes once the new list has been persisted
        if self._persist is not None:
            self._persist(list(records))
        self._records = records


def decode_trades(raw):
    """Decode a stored JSON array, skipping entries that fail validation."""
    records = []
    seen = set()
    for entry in json.loads(raw):
        try:
            record = TradeRecord.from_dict(entry)
        except ValidationError as e:
            trade_id = entry.get('id') if isinstance(entry, dict) else None
            logger.warning("Skipping stored trade %s: %s", trade_id, e)
            continue
        if record.id in seen:
            logger.warning("Skipping stored trade with duplicate id %s", record.id)
            continue
        seen.add(record.id)
        records.append(record)
    return records


def encode_trades(records):
    return json.dumps([record.to_dict() for record in records])


def load_trades(key=DEFAULT_STORAGE_KEY):
    # Must run inside an application context
    blob = db.session.get(JournalBlob, key)
    if blob is None:
        return []
    records = decode_trades(blob.value)
    logger.info("Loaded %d trades from %r", len(records), key)
    return records


def save_trades(records, key=DEFAULT_STORAGE_KEY):
    blob = db.session.get(JournalBlob, key)
    if blob is None:
        blob = JournalBlob(key=key, value='[]')
        db.session.add(blob)
    blob.value = encode_trades(records)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.debug("Persisted %d trades to %r", len(records), key)
