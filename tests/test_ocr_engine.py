import pytesseract
import pytest
from PIL import Image

from idscan.config import OCRConfig
from idscan.exceptions import OCRError, TesseractNotFoundError
from idscan.ocr import TesseractEngine


@pytest.fixture
def tesseract(monkeypatch):
    """Stub out the tesseract binary; records image_to_string calls."""
    calls = []

    def image_to_string(image, lang=None, config=None):
        calls.append({"image": image, "lang": lang, "config": config})
        return "  Ravi Kumar  \n\n Male \n\n1234 5678 9012\n"

    monkeypatch.setattr(pytesseract.pytesseract, "tesseract_cmd", "tesseract")
    monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
    monkeypatch.setattr(pytesseract, "image_to_string", image_to_string)
    return calls


@pytest.fixture
def engine():
    return TesseractEngine(OCRConfig(languages="eng", tesseract_path="", min_text_length=30))


def test_to_lines_drops_blank_lines():
    assert TesseractEngine.to_lines(" a \n\n\n b\t\n") == "a\nb"
    assert TesseractEngine.to_lines("") == ""


def test_recognize_pil_image(tesseract, engine):
    text = engine.recognize(Image.new("RGB", (40, 20), "white"))

    assert text == "Ravi Kumar\nMale\n1234 5678 9012"
    assert tesseract[0]["lang"] == "eng"
    assert "--psm 6" in tesseract[0]["config"]
    assert tesseract[0]["image"].mode == "L"


def test_recognize_image_file(tesseract, engine, tmp_path):
    path = tmp_path / "card.png"
    Image.new("RGB", (40, 20), "white").save(path)

    assert engine.recognize(path).startswith("Ravi Kumar")
    assert engine.recognize(str(path)).startswith("Ravi Kumar")


def test_missing_image_file(tesseract, engine, tmp_path):
    with pytest.raises(OCRError) as excinfo:
        engine.recognize(tmp_path / "missing.jpg")
    assert excinfo.value.details["image_path"].endswith("missing.jpg")


def test_not_an_image(tesseract, engine, tmp_path):
    path = tmp_path / "notes.jpg"
    path.write_text("not really a jpeg")

    with pytest.raises(OCRError):
        engine.recognize(path)


def test_configured_tesseract_path(tesseract):
    engine = TesseractEngine(OCRConfig(languages="eng", tesseract_path="/opt/tesseract/bin/tesseract"))
    engine.recognize(Image.new("RGB", (10, 10)))

    assert pytesseract.pytesseract.tesseract_cmd == "/opt/tesseract/bin/tesseract"


def test_tesseract_missing(monkeypatch, engine):
    def not_installed():
        raise pytesseract.TesseractNotFoundError()

    monkeypatch.setattr(pytesseract, "get_tesseract_version", not_installed)

    with pytest.raises(TesseractNotFoundError) as excinfo:
        engine.recognize(Image.new("RGB", (10, 10)))
    assert isinstance(excinfo.value, OCRError)


def test_tesseract_failure_is_wrapped(tesseract, monkeypatch, engine):
    def broken(image, lang=None, config=None):
        raise pytesseract.TesseractError(1, "Failed loading language 'eng'")

    monkeypatch.setattr(pytesseract, "image_to_string", broken)

    with pytest.raises(OCRError) as excinfo:
        engine.recognize(Image.new("RGB", (10, 10)))
    assert excinfo.value.details["languages"] == "eng"
