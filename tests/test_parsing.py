"""
Unit tests for delimited text parsing.
"""
import pytest

from core.exceptions import EmptyInputError
from core.parsing import normalize_header, parse_delimited_text


def test_parse_basic():
    text = "Date,Description,Amount\n2024-01-05,Shell Gas,42.50\n2024-01-06,Staples,15.00\n"
    rows = parse_delimited_text(text)
    assert rows == [
        {"date": "2024-01-05", "description": "Shell Gas", "amount": "42.50"},
        {"date": "2024-01-06", "description": "Staples", "amount": "15.00"},
    ]


def test_header_normalization():
    assert normalize_header("  Transaction   Date ") == "transaction_date"
    assert normalize_header("Expense\tDate") == "expense_date"
    assert normalize_header("AMOUNT") == "amount"


def test_values_are_trimmed():
    rows = parse_delimited_text("payee , debit\n  Home Depot  ,  19.99 \n")
    assert rows == [{"payee": "Home Depot", "debit": "19.99"}]


def test_blank_lines_skipped():
    text = "\n\n  \ndate,amount\n\n2024-01-01,1.00\n   \n2024-01-02,2.00\n\n"
    rows = parse_delimited_text(text)
    assert [r["amount"] for r in rows] == ["1.00", "2.00"]


def test_short_row_padded_and_extra_fields_ignored():
    rows = parse_delimited_text("a,b,c\n1\n1,2,3,4,5\n")
    assert rows[0] == {"a": "1", "b": "", "c": ""}
    assert rows[1] == {"a": "1", "b": "2", "c": "3"}


def test_crlf_line_endings():
    rows = parse_delimited_text("date,amount\r\n2024-01-01,5.00\r\n")
    assert rows == [{"date": "2024-01-01", "amount": "5.00"}]


def test_byte_order_mark_stripped():
    rows = parse_delimited_text("\ufeffDate,Amount\n2024-01-01,5.00\n")
    assert list(rows[0].keys()) == ["date", "amount"]


def test_header_only_is_empty_batch():
    assert parse_delimited_text("date,description,amount\n") == []


@pytest.mark.parametrize("text", ["", "\n", "   \n\n \r\n"])
def test_empty_input_raises(text):
    with pytest.raises(EmptyInputError):
        parse_delimited_text(text)


def test_quoted_delimiter_is_not_special():
    # Quoting is not supported: the comma splits the quoted value
    rows = parse_delimited_text('description,amount\n"Acme, Inc",10.00\n')
    assert rows == [{"description": '"Acme', "amount": 'Inc"'}]


def test_custom_delimiter():
    rows = parse_delimited_text("date;amount\n2024-01-01;3.00\n", delimiter=";")
    assert rows == [{"date": "2024-01-01", "amount": "3.00"}]


@pytest.mark.parametrize("separator", ["\x85", "\u2028", "\u2029", "\x0b", "\x0c", "\x1c"])
def test_unicode_line_separators_stay_inside_field(separator):
    text = f"description,amount\nCafe Bar,5.00\nShop{separator}Two,6.00\n"
    rows = parse_delimited_text(text)
    assert rows == [
        {"description": "Cafe Bar", "amount": "5.00"},
        {"description": f"Shop{separator}Two", "amount": "6.00"},
    ]


def test_mixed_line_endings():
    rows = parse_delimited_text("date,amount\r\n2024-01-01,1.00\r2024-01-02,2.00\n2024-01-03,3.00")
    assert [r["amount"] for r in rows] == ["1.00", "2.00", "3.00"]
