from unittest.mock import MagicMock

import psycopg2
import pytest

from idscan.config import DBConfig
from idscan.exceptions import DataPersistenceError
from idscan.models import FieldSet, IdentityRecord
from idscan.persistence import create_repository
from idscan.persistence.postgres import PostgresRepository


@pytest.fixture
def conn(monkeypatch):
    connection = MagicMock()
    connection.closed = False
    monkeypatch.setattr(psycopg2, "connect", MagicMock(return_value=connection))
    return connection


@pytest.fixture
def cursor(conn):
    return conn.cursor.return_value.__enter__.return_value


@pytest.fixture
def pg_repo():
    return PostgresRepository(DBConfig(backend="postgres", host="db", name="ids", user="scanner"))


def make_record():
    return IdentityRecord.from_fields(
        FieldSet(document_number="123456789012", name="Ravi Kumar", address="12 MG Road"),
        scanned_at="18/10/2026, 10:00:00 AM",
    )


def test_create_repository_selects_postgres(config):
    config.db.backend = "postgres"
    config.db.host, config.db.name, config.db.user = "db", "ids", "scanner"
    assert isinstance(create_repository(config), PostgresRepository)


def test_connect_failure_is_wrapped(monkeypatch, pg_repo):
    monkeypatch.setattr(psycopg2, "connect", MagicMock(side_effect=psycopg2.OperationalError("refused")))

    with pytest.raises(DataPersistenceError) as excinfo:
        pg_repo.init_db()
    assert excinfo.value.details["operation"] == "connect"


def test_init_db_creates_table(conn, cursor, pg_repo):
    pg_repo.init_db()

    sql = cursor.execute.call_args[0][0]
    assert "CREATE TABLE IF NOT EXISTS identity_records" in sql
    assert "document_number TEXT UNIQUE" in sql
    conn.commit.assert_called_once()


def test_upsert_inserts_new_record(conn, cursor, pg_repo):
    cursor.fetchone.side_effect = [None, (7, True)]
    seen = []

    record_id, created = pg_repo.upsert(make_record(), guard=seen.append)

    assert (record_id, created) == (7, True)
    assert seen == [None]
    lock, lookup, upsert = [c[0][0] for c in cursor.execute.call_args_list]
    assert "LOCK TABLE identity_records IN SHARE ROW EXCLUSIVE MODE" in lock
    assert "WHERE document_number = %s" in lookup
    assert "ON CONFLICT (document_number) DO UPDATE" in upsert
    assert "xmax = 0" in upsert
    conn.commit.assert_called_once()


def test_upsert_updates_existing_record(conn, cursor, pg_repo):
    cursor.fetchone.side_effect = [(7,), (7, False)]

    assert pg_repo.upsert(make_record()) == (7, False)


def test_upsert_created_flag_comes_from_write(conn, cursor, pg_repo):
    # lookup saw no row but the write hit an existing one
    cursor.fetchone.side_effect = [None, (7, False)]

    assert pg_repo.upsert(make_record()) == (7, False)


def test_upsert_guard_failure_rolls_back(conn, cursor, pg_repo):
    cursor.fetchone.side_effect = [(3,)]

    def refuse(holder_id):
        raise RuntimeError("refused")

    with pytest.raises(RuntimeError):
        pg_repo.upsert(make_record(), guard=refuse)

    assert cursor.execute.call_count == 2
    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()


def test_upsert_database_error_is_wrapped(conn, cursor, pg_repo):
    cursor.execute.side_effect = psycopg2.Error("boom")

    with pytest.raises(DataPersistenceError):
        pg_repo.upsert(make_record())
    conn.rollback.assert_called_once()


def test_delete_reports_rowcount(conn, cursor, pg_repo):
    cursor.rowcount = 1
    assert pg_repo.delete(7)
    cursor.rowcount = 0
    assert not pg_repo.delete(7)


def test_list_all_maps_rows(conn, cursor, pg_repo):
    cursor.fetchall.return_value = [{
        "id": 7,
        "name": "Ravi Kumar",
        "document_number": "123456789012",
        "date_of_birth": None,
        "address": "12 MG Road",
        "gender": "Male",
        "phone_number": None,
        "scanned_at": "18/10/2026, 10:00:00 AM",
    }]

    records = pg_repo.list_all()

    assert records[0].id == 7
    assert records[0].date_of_birth == ""
    assert records[0].phone_number == ""


def test_close(conn, pg_repo):
    pg_repo.init_db()
    pg_repo.close()
    conn.close.assert_called_once()
