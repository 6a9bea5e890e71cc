import pytest
from rich.console import Console

from idscan import cli
from idscan.persistence import open_repository
from idscan.processors import ScanProcessor

from conftest import BACK_TEXT, FRONT_TEXT, FakeEngine

SAVE_ARGS = [
    "save",
    "--name", "Ravi Kumar",
    "--number", "1234 5678 9012",
    "--dob", "15/08/1985",
    "--gender", "Male",
    "--mobile", "9876543210",
    "--address", "12 MG Road, Bangalore",
]


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    # Tables must not wrap cell values in captured output
    monkeypatch.setattr(cli, "console", Console(width=200))


@pytest.fixture
def fake_scanner(monkeypatch, config):
    engine = FakeEngine({
        "card.jpg": FRONT_TEXT,
        "front.jpg": FRONT_TEXT,
        "back.jpg": BACK_TEXT,
        "blurry.jpg": "blurry txt",
    })
    monkeypatch.setattr(cli, "ScanProcessor", lambda: ScanProcessor(engine=engine, config=config))
    return engine


def stored(config):
    with open_repository(config) as repo:
        return repo.list_all()


def test_save_and_resave(config):
    assert cli.main(SAVE_ARGS) == 0
    assert cli.main(SAVE_ARGS[:-1] + ["22 MG Road, Bangalore"]) == 0

    records = stored(config)
    assert len(records) == 1
    assert records[0].document_number == "123456789012"
    assert records[0].address == "22 MG Road, Bangalore"


def test_save_invalid_fields(config, capsys):
    assert cli.main(["save", "--name", "Ravi Kumar", "--number", "1234"]) == 1

    out = capsys.readouterr().out
    assert "document_number" in out
    assert "address" in out
    assert stored(config) == []


def test_list(config, capsys):
    assert cli.main(["list"]) == 0
    assert "No records" in capsys.readouterr().out

    cli.main(SAVE_ARGS)
    assert cli.main(["list"]) == 0
    assert "xxxx-xxxx-9012" in capsys.readouterr().out


def test_export_masked(config, tmp_path):
    cli.main(SAVE_ARGS)
    target = tmp_path / "records.csv"

    assert cli.main(["export", "--mask", "--output", str(target)]) == 0

    content = target.read_text(encoding="utf-8")
    assert "xxxx-xxxx-9012" in content
    assert "123456789012" not in content


def test_export_unmasked_to_export_dir(config):
    cli.main(SAVE_ARGS)

    assert cli.main(["export", "--no-mask"]) == 0

    exported = list(config.export.export_dir.glob("AadharRecords_*.csv"))
    assert len(exported) == 1
    assert "123456789012" in exported[0].read_text(encoding="utf-8")


def test_export_without_records(config):
    assert cli.main(["export"]) == 1


def test_delete(config):
    cli.main(SAVE_ARGS)
    record_id = stored(config)[0].id

    assert cli.main(["delete", str(record_id)]) == 0
    assert cli.main(["delete", str(record_id)]) == 1
    assert stored(config) == []


def test_scan_and_save(fake_scanner, config):
    assert cli.main(["scan", "card.jpg", "--save"]) == 0

    records = stored(config)
    assert [r.name for r in records] == ["Ravi Kumar"]
    assert records[0].address == "Old address line"


def test_scan_dual(fake_scanner, config):
    assert cli.main(["scan", "front.jpg", "back.jpg", "--mode", "dual", "--save"]) == 0
    assert stored(config)[0].address == "S/O Suresh Kumar, 12 MG Road, Bangalore 560001"


def test_scan_dual_unclear_back_is_not_saved(fake_scanner, config):
    assert cli.main(["scan", "front.jpg", "blurry.jpg", "--mode", "dual", "--save"]) == 1
    assert stored(config) == []


def test_scan_unclear_image(fake_scanner, config):
    assert cli.main(["scan", "blurry.jpg"]) == 1


def test_edit_changes_only_given_options(config):
    cli.main(SAVE_ARGS)
    record_id = stored(config)[0].id

    assert cli.main(["save", "--id", str(record_id), "--mobile", "9123456780"]) == 0

    records = stored(config)
    assert len(records) == 1
    assert records[0].id == record_id
    assert records[0].phone_number == "9123456780"
    assert records[0].name == "Ravi Kumar"
    assert records[0].date_of_birth == "15/08/1985"
    assert records[0].address == "12 MG Road, Bangalore"


def test_edit_unknown_record(config, capsys):
    assert cli.main(["save", "--id", "42", "--name", "Ravi Kumar"]) == 1
    assert "not found" in capsys.readouterr().out
    assert stored(config) == []
