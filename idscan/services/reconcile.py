"""
Record reconciliation: validate a FieldSet and upsert it by document number.

Re-scanning or editing a document with a known number always updates the
existing row in place, so a record keeps its id for its whole life.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import MINYEAR, date, datetime
from typing import Dict, List, Optional

from ..config import Config, get_config
from ..exceptions import DuplicateKeyMergeError, ValidationError
from ..export.csv_export import mask
from ..logger import get_logger
from ..models import FieldSet, IdentityRecord, SaveResult
from ..persistence.repository import RecordRepository
from ..utils.clock import IST, Clock, format_timestamp, now_ist, parse_timestamp, today_ist

logger = get_logger(__name__)

NAME_PATTERN = re.compile(r"[A-Za-z ]+")
DOCUMENT_NUMBER_PATTERN = re.compile(r"[0-9]{12}")
PHONE_PATTERN = re.compile(r"[0-9]{10}")
FULL_DATE_PATTERN = re.compile(r"([0-9]{2})[/-]([0-9]{2})[/-]([0-9]{4})")
YEAR_ONLY_PATTERN = re.compile(r"[0-9]{4}")

OLDEST = datetime.min.replace(tzinfo=IST)


def canonical_fields(fields: FieldSet) -> FieldSet:
    """Strip separators that manual entry may add to numeric fields."""
    return replace(
        fields,
        document_number=re.sub(r"[\s-]", "", fields.document_number),
        phone_number=re.sub(r"[\s-]", "", fields.phone_number),
    )


def check_date_of_birth(value: str, today: date) -> Optional[str]:
    """Reason the date of birth is invalid, or None if it is acceptable."""
    match = FULL_DATE_PATTERN.fullmatch(value)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            born = date(year, month, day)
        except ValueError:
            return "not a real calendar date"
        if born > today:
            return "is in the future"
        return None

    if YEAR_ONLY_PATTERN.fullmatch(value):
        if int(value) < MINYEAR:
            return "not a real calendar year"
        if int(value) > today.year:
            return "is in the future"
        return None

    return "must be DD/MM/YYYY, DD-MM-YYYY or a 4-digit year"


def validate_fields(fields: FieldSet, today: date) -> Dict[str, str]:
    """
    Check every field's format rule.

    Returns:
        Mapping of failing field name to reason (empty when valid)
    """
    errors: Dict[str, str] = {}

    if not fields.name:
        errors["name"] = "is required"
    elif not NAME_PATTERN.fullmatch(fields.name):
        errors["name"] = "may only contain letters and spaces"

    if not DOCUMENT_NUMBER_PATTERN.fullmatch(fields.document_number):
        errors["document_number"] = "must be exactly 12 digits"

    if not fields.address.strip():
        errors["address"] = "is required"

    if fields.phone_number and not PHONE_PATTERN.fullmatch(fields.phone_number):
        errors["phone_number"] = "must be exactly 10 digits"

    if fields.date_of_birth:
        reason = check_date_of_birth(fields.date_of_birth, today)
        if reason:
            errors["date_of_birth"] = reason

    return errors


class RecordService:
    """
    Saves extracted or edited field sets into a record store.

    Attributes:
        repository: Store the records live in (owned by the caller)
        clock: Source of the current time; `scanned_at` is always taken from it
        strict_duplicate_keys: Raise DuplicateKeyMergeError instead of letting
            an edit overwrite another record holding the same number
    """

    def __init__(
        self,
        repository: RecordRepository,
        clock: Optional[Clock] = None,
        config: Optional[Config] = None,
        strict_duplicate_keys: Optional[bool] = None,
    ):
        config = config or get_config()
        self.repository = repository
        self.clock = clock or now_ist
        if strict_duplicate_keys is None:
            strict_duplicate_keys = config.strict_duplicate_keys
        self.strict_duplicate_keys = strict_duplicate_keys

    def validate(self, fields: FieldSet) -> FieldSet:
        """Canonicalize and validate; raises ValidationError naming every bad field."""
        fields = canonical_fields(fields)
        errors = validate_fields(fields, today_ist(self.clock))
        if errors:
            logger.info(f"Rejected save, invalid fields: {', '.join(errors)}")
            raise ValidationError(errors)
        return fields

    def save(self, fields: FieldSet, existing_id: Optional[int] = None) -> SaveResult:
        """
        Validate and upsert by document number.

        Args:
            fields: Extracted or manually edited fields
            existing_id: Id of the record being edited, if any

        Returns:
            SaveResult with the id of the row now holding the data

        Raises:
            ValidationError: a field failed its format rule (nothing written)
            DuplicateKeyMergeError: strict mode only, the number belongs to a
                different record than the one being edited (nothing written)
        """
        fields = self.validate(fields)
        record = IdentityRecord.from_fields(fields, scanned_at=format_timestamp(self.clock()))
        masked = mask(fields.document_number)
        merged_from: List[int] = []

        def guard(holder_id: Optional[int]) -> None:
            if existing_id is None or holder_id is None or holder_id == existing_id:
                return
            if self.strict_duplicate_keys:
                raise DuplicateKeyMergeError(existing_id, holder_id, masked)
            logger.warning(
                f"DuplicateKeyMerge: edit of record {existing_id} overwrites record "
                f"{holder_id} holding {masked}"
            )
            merged_from.append(existing_id)

        record_id, created = self.repository.upsert(record, guard=guard)

        if created and existing_id is not None:
            logger.info(f"Edit of record {existing_id} saved as new record {record_id} ({masked})")
        else:
            logger.info(f"{'Created' if created else 'Updated'} record {record_id} ({masked})")

        return SaveResult(
            record_id=record_id,
            created=created,
            merged_from=merged_from[0] if merged_from else None,
        )

    def get(self, record_id: int) -> Optional[IdentityRecord]:
        return self.repository.get(record_id)

    def get_by_document_number(self, document_number: str) -> Optional[IdentityRecord]:
        return self.repository.get_by_document_number(document_number)

    def list_records(self, newest_first: bool = True) -> List[IdentityRecord]:
        """Records ordered by scan time (unparseable timestamps sort oldest), then id."""
        return sorted(
            self.repository.list_all(),
            key=lambda r: (parse_timestamp(r.scanned_at) or OLDEST, r.id or 0),
            reverse=newest_first,
        )

    def delete(self, record_id: int) -> bool:
        deleted = self.repository.delete(record_id)
        if deleted:
            logger.info(f"Deleted record {record_id}")
        else:
            logger.warning(f"Record {record_id} not found, nothing deleted")
        return deleted

    def count(self) -> int:
        return self.repository.count()
