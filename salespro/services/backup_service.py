"""
Full-database backup to one JSON document and destructive restore.

Transit shape (what goes in the file) differs from the live record shape:
field names are camelCase and a sale's bill image travels as two sidecar
fields, billImageBase64 + billImageType. Only this module converts between
the two; live records never carry the sidecars.

Restore parses, decodes and validates the whole document before anything is
cleared, then replaces every collection inside one transaction.
"""
from __future__ import annotations

import base64
import binascii
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import structlog

from salespro.config import EXPORTS_DIR
from salespro.constants import (
    ALL_COLLECTIONS,
    ATTENDANCE,
    BACKUP_IMAGE_FIELD,
    BACKUP_IMAGE_TYPE_FIELD,
    CRM,
    DEFAULT_IMAGE_MIME,
    SALES,
    SETTINGS,
    SETTINGS_KEY,
    TARGETS,
)
from salespro.db.dao import (
    validate_attendance,
    validate_crm_issue,
    validate_sale,
    validate_settings,
    validate_target,
)
from salespro.db.record_store import Record, RecordStore
from salespro.errors import BackupFormatError, BackupImportError, StorageError, ValidationError
from salespro.models.attendance import Attendance
from salespro.models.crm_issue import CrmIssue
from salespro.models.sale import Sale
from salespro.models.settings import Settings
from salespro.models.target import Target
from salespro.utils import camel_to_snake, snake_to_camel

logger = structlog.get_logger(__name__)

_MODELS = {
    SALES: Sale,
    ATTENDANCE: Attendance,
    TARGETS: Target,
    CRM: CrmIssue,
    SETTINGS: Settings,
}

_VALIDATORS = {
    SALES: validate_sale,
    ATTENDANCE: validate_attendance,
    TARGETS: validate_target,
    CRM: validate_crm_issue,
    SETTINGS: validate_settings,
}

# Keys the browser build wrote for a Blob; never meaningful on import.
_IGNORED_TRANSIT_KEYS = {BACKUP_IMAGE_FIELD, BACKUP_IMAGE_TYPE_FIELD, "billImage"}


def to_transit(collection: str, record: Record) -> dict[str, Any]:
    """Live record -> backup document entry."""
    rec = _MODELS[collection].from_record(record).to_record()
    sidecars: dict[str, Any] = {}
    if collection == SALES:
        blob = rec.pop("bill_image")
        mime = rec.pop("bill_image_type")
        if blob is not None:
            sidecars[BACKUP_IMAGE_FIELD] = base64.b64encode(blob).decode("ascii")
            sidecars[BACKUP_IMAGE_TYPE_FIELD] = mime or DEFAULT_IMAGE_MIME
    out = {snake_to_camel(k): v for k, v in rec.items() if v is not None}
    out.update(sidecars)
    return out


def from_transit(collection: str, item: Any, position: int) -> Record:
    """Backup document entry -> live record, sidecars decoded and stripped."""
    where = f"{collection}[{position}]"
    if not isinstance(item, dict):
        raise BackupFormatError(f"{where} is not an object")

    data = {
        camel_to_snake(k): v
        for k, v in item.items()
        if k not in _IGNORED_TRANSIT_KEYS
    }

    if collection == SALES:
        encoded = item.get(BACKUP_IMAGE_FIELD)
        if encoded:
            try:
                data["bill_image"] = base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError, TypeError) as exc:
                raise BackupFormatError(f"{where}: bill image is not valid base64") from exc
            data["bill_image_type"] = item.get(BACKUP_IMAGE_TYPE_FIELD) or DEFAULT_IMAGE_MIME

    if collection == SETTINGS:
        data.setdefault("id", SETTINGS_KEY)

    try:
        model = _MODELS[collection].from_record(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise BackupFormatError(f"{where}: invalid record ({exc!r})") from exc
    try:
        _VALIDATORS[collection](model)
    except ValidationError as exc:
        raise BackupFormatError(f"{where}: {exc}") from exc
    return model.to_record()


class BackupService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def export_document(self) -> dict[str, list[dict[str, Any]]]:
        snapshot = await self.store.dump_all()
        return {
            name: [to_transit(name, rec) for rec in snapshot.get(name, [])]
            for name in ALL_COLLECTIONS
        }

    async def export_backup(self, out_path: Optional[Path] = None) -> Path:
        """Write the backup document; returns the file path."""
        doc = await self.export_document()
        if out_path is None:
            EXPORTS_DIR.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            out_path = EXPORTS_DIR / f"sales_backup_{stamp}.json"
        out_path = Path(out_path)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(json.dumps(doc, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not write backup file: {exc}") from exc
        logger.info(
            "backup_exported",
            path=str(out_path),
            counts={name: len(items) for name, items in doc.items()},
        )
        return out_path

    def parse_document(self, source: str | bytes | Path | dict) -> dict[str, list[Record]]:
        """
        Validate and decode a backup without touching the store.
        str/bytes are JSON text, Path is a file, dict is an already parsed document.
        """
        if isinstance(source, Path):
            try:
                source = source.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise BackupFormatError(f"Cannot read backup file: {exc}") from exc

        if isinstance(source, (str, bytes)):
            try:
                doc = json.loads(source)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise BackupFormatError(f"Invalid file format: {exc}") from exc
        else:
            doc = source

        if not isinstance(doc, dict):
            raise BackupFormatError("Backup must be a JSON object keyed by collection")
        if not any(name in doc for name in ALL_COLLECTIONS):
            raise BackupFormatError("Backup contains none of the known collections")

        unknown = sorted(set(doc) - set(ALL_COLLECTIONS))
        if unknown:
            logger.warning("backup_unknown_keys_ignored", keys=unknown)

        snapshot: dict[str, list[Record]] = {}
        for name in ALL_COLLECTIONS:
            items = doc.get(name)
            if items is None:
                snapshot[name] = []
                continue
            if not isinstance(items, list):
                raise BackupFormatError(f"{name} must be an array")
            snapshot[name] = [from_transit(name, item, i) for i, item in enumerate(items)]
        return snapshot

    async def import_backup(self, source: str | bytes | Path | dict) -> dict[str, int]:
        """
        Replace every collection with the backup contents.
        Raises BackupFormatError before clearing anything, or BackupImportError
        after a rolled-back restore.
        """
        try:
            snapshot = self.parse_document(source)
        except BackupFormatError as exc:
            logger.error("backup_rejected", error=str(exc))
            raise

        logger.warning(
            "backup_import_started",
            counts={name: len(records) for name, records in snapshot.items()},
        )
        try:
            restored = await self.store.replace_all(snapshot)
        except (StorageError, ValueError) as exc:
            logger.error("backup_import_failed", error=str(exc), rolled_back=True)
            raise BackupImportError(
                f"Failed to import data; previous data was kept. ({exc})"
            ) from exc

        logger.info("backup_imported", restored=restored)
        return restored
