import pytest

from idscan.extraction import extract, normalize
from idscan.extraction.fields import (
    extract_address,
    extract_date_of_birth,
    extract_document_number,
    extract_gender,
    extract_name,
    extract_phone_number,
    find_gender,
)

SAMPLE = "NAME\nJOHN SMITH\nDOB 01/01/1990\nAddress\n12 MG Road\nBangalore\n560001\nMale\n1234 5678 9012"


def test_sample_card_text():
    fields = extract(SAMPLE)

    assert fields.document_number == "123456789012"
    assert fields.date_of_birth == "01/01/1990"
    assert fields.gender == "Male"
    # "NAME" is itself an all-letters line without excluded keywords
    assert fields.name == "NAME"
    assert "12 MG Road, Bangalore, 560001" in fields.address


@pytest.mark.parametrize("text", [
    "",
    "no numbers here",
    "12345678901",
    "1234 5678 901",
    "1234-5678-9012",
    "12  3456 7890 12",
])
def test_document_number_requires_twelve_digit_run(text):
    assert extract_document_number(normalize(text)) == ""


@pytest.mark.parametrize("text, expected", [
    ("123456789012", "123456789012"),
    ("No. 1234 5678 9012 issued", "123456789012"),
    ("first 111122223333 then 444455556666", "111122223333"),
    # noise lines are dropped from the line list only, the number stays in the text
    ("Your Aadhaar No. : 1234 5678 9012", "123456789012"),
])
def test_document_number_first_match_separators_stripped(text, expected):
    assert extract_document_number(normalize(text)) == expected


def test_document_number_not_taken_from_longer_run():
    assert extract_document_number(normalize("1234567890123456")) == ""


def test_dob_prefers_full_date_on_labelled_line():
    text = "Ravi Kumar\nDate of Birth: 15-08-1985 (1985)\nMale"
    assert extract_date_of_birth(normalize(text)) == "15-08-1985"


def test_dob_falls_back_to_year_on_labelled_line():
    text = "Ravi Kumar\nDOB: 1985\nMale"
    assert extract_date_of_birth(normalize(text)) == "1985"


def test_dob_empty_without_label():
    text = "Ravi Kumar\n15/08/1985\nMale"
    assert extract_date_of_birth(normalize(text)) == ""


def test_dob_uses_first_labelled_line_only():
    text = "dob unknown\nDOB: 15/08/1985"
    assert extract_date_of_birth(normalize(text)) == ""


@pytest.mark.parametrize("text, expected", [
    ("Male", "Male"),
    ("MALE / पुरुष", "Male"),
    ("Female", "Female"),
    ("FEMALE", "Female"),
    ("Gender: female", "Female"),
    ("Ravi Kumar", ""),
    ("", ""),
    ("GenderFemale", "Female"),
    ("GenderMale", "Male"),
])
def test_gender_female_never_misread_as_male(text, expected):
    assert find_gender(text) == expected
    assert extract_gender(normalize(text)) == expected


def test_phone_first_ten_digit_mobile():
    text = "Mobile 5123456789\nAlt 9876543210\n8123456789"
    assert extract_phone_number(normalize(text)) == "9876543210"


def test_phone_not_taken_from_document_number():
    text = "123456789012\n987654321012"
    assert extract_phone_number(normalize(text)) == ""


def test_name_first_all_letters_line_without_keywords():
    text = "\n".join([
        "Enrolment 1234",
        "Father Suresh Kumar",
        "Year of Birth",
        "Ravi Kumar",
        "Anita Kumari",
    ])
    assert extract_name(normalize(text)) == "Ravi Kumar"


def test_name_empty_when_no_line_qualifies():
    text = "DOB: 15/08/1985\nR4vi Kum@r\nGender Male"
    assert extract_name(normalize(text)) == ""


def test_address_takes_five_lines_and_drops_web_noise():
    text = "\n".join([
        "Ravi Kumar",
        "Address:",
        "S/O Suresh Kumar",
        "12 MG Road",
        "http://example.org",
        "Bangalore 560001",
        "Karnataka",
        "Too far down",
    ])
    address = extract_address(normalize(text))
    assert address == "S/O Suresh Kumar, 12 MG Road, Bangalore 560001, Karnataka"


def test_address_drops_help_and_mailto_lines():
    text = "Address\n12 MG Road\nhelp line 1947\nmailto:someone@example.org\nBangalore"
    assert extract_address(normalize(text)) == "12 MG Road, Bangalore"


def test_address_empty_without_label():
    assert extract_address(normalize("Ravi Kumar\n12 MG Road")) == ""


def test_extraction_never_fails():
    fields = extract(None)
    assert fields.is_empty
