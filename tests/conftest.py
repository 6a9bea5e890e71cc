import os
from datetime import datetime, timedelta

# Keep test runs from writing log files; must be set before idscan is imported
os.environ["LOG_TO_FILE"] = "0"

import pytest

from idscan.config import get_config, reset_config
from idscan.models import FieldSet
from idscan.ocr import OCREngine
from idscan.persistence import SQLiteRepository
from idscan.services import RecordService
from idscan.utils.clock import IST


class TickingClock:
    """Deterministic clock that advances one minute per call."""

    def __init__(self, start=None, step=timedelta(minutes=1)):
        self.current = start or datetime(2026, 10, 18, 10, 0, 0, tzinfo=IST)
        self.step = step

    def __call__(self):
        now = self.current
        self.current = self.current + self.step
        return now


class FakeEngine(OCREngine):
    """OCR engine returning canned text per image name, recording call order."""

    name = "fake"

    def __init__(self, texts):
        self.texts = texts
        self.calls = []

    def recognize(self, image):
        key = str(image)
        self.calls.append(key)
        value = self.texts[key]
        if isinstance(value, Exception):
            raise value
        return value


FRONT_TEXT = """Government of India
Ravi Kumar
DOB: 15/08/1985
Male
1234 5678 9012
Address
Old address line"""

BACK_TEXT = """Unique Identification Authority of India
Address:
S/O Suresh Kumar
12 MG Road
Bangalore 560001
www.uidai.gov.in
help@uidai.gov.in"""

LETTER_TEXT = """Unique Identification Authority of India
Enrolment No: 1234/56789/01234
To
Ravi Kumar
S/O Suresh Kumar
12 MG Road
Bangalore Karnataka 560001
9876543210
Your Aadhaar No. :
1234 5678 9012"""


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.setenv("IDSCAN_HOME", str(tmp_path))
    monkeypatch.setenv("LOG_TO_FILE", "0")
    for key in ("DB_BACKEND", "SQLITE_PATH", "EXPORT_DIR", "EXPORT_MASK",
                "STRICT_DUPLICATE_KEYS", "OCR_MIN_TEXT_LENGTH", "DEBUG"):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield get_config()
    reset_config()


@pytest.fixture
def repo(tmp_path):
    repository = SQLiteRepository(tmp_path / "records.db")
    repository.init_db()
    yield repository
    repository.close()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def service(config, repo, clock):
    return RecordService(repo, clock=clock, config=config)


@pytest.fixture
def valid_fields():
    return FieldSet(
        document_number="123456789012",
        name="Ravi Kumar",
        date_of_birth="15/08/1985",
        gender="Male",
        phone_number="9876543210",
        address="S/O Suresh Kumar, 12 MG Road, Bangalore 560001",
    )
