import pytest

from tyrebot.api.csv_rows import CsvFormatError, KnowledgeCsv, split_keywords


def test_rows_are_normalised():
    rows = list(KnowledgeCsv(b"Category,Question,Answer,Keywords\n Warranty , What is covered? , Defects. ,\"a, ,b\"\n"))

    assert rows == [{"category": "Warranty", "question": "What is covered?", "answer": "Defects.", "keywords": ["a", "b"]}]


def test_keywords_column_is_optional():
    rows = list(KnowledgeCsv(b"category,question,answer\nProducts,Farm tyres?,Yes.\n"))

    assert rows[0]["keywords"] == []


def test_byte_order_mark_is_tolerated():
    rows = list(KnowledgeCsv("\ufeffcategory,question,answer\nProducts,Farm tyres?,Yes.\n".encode("utf-8")))

    assert rows[0]["category"] == "Products"


def test_iteration_can_restart():
    parsed = KnowledgeCsv(b"category,question,answer\nProducts,Farm tyres?,Yes.\n")

    assert list(parsed) == list(parsed)


def test_missing_required_column_is_reported():
    with pytest.raises(CsvFormatError) as excinfo:
        list(KnowledgeCsv(b"category,question\nProducts,Farm tyres?\n"))

    assert "answer" in excinfo.value.user_message


def test_blank_required_value_reports_line_number():
    with pytest.raises(CsvFormatError) as excinfo:
        list(KnowledgeCsv(b"category,question,answer\nProducts,Farm tyres?,Yes.\nProducts,Truck tyres?,\n"))

    assert excinfo.value.user_message.startswith("Line 3")


def test_non_utf8_payload_is_rejected():
    with pytest.raises(CsvFormatError):
        KnowledgeCsv("categoría".encode("utf-16"))


def test_split_keywords_drops_blanks():
    assert split_keywords(" tread , ,wear,") == ["tread", "wear"]
    assert split_keywords(None) == []


def test_line_number_accounts_for_multi_line_cells():
    payload = b'category,question,answer\nProducts,"Farm\ntyres?",Yes.\nProducts,Truck tyres?,\n'

    with pytest.raises(CsvFormatError) as excinfo:
        list(KnowledgeCsv(payload))

    assert excinfo.value.user_message.startswith("Line 4")
