"""Upload parsing: every cell is read as text, trimmed, and blank rows dropped."""

import pytest

from pnl_app.utils.file_reader import FileReadError, read_rows


def test_cells_are_trimmed_and_blank_rows_dropped():
    content = b"Supplier , Product Name,Price\n  W1 ,  P1  , 100 \n   ,  , \nW2,P2,200\n"

    rows = read_rows(content, "prices.csv")

    assert rows == [
        {"Supplier": "W1", "Product Name": "P1", "Price": "100"},
        {"Supplier": "W2", "Product Name": "P2", "Price": "200"},
    ]


def test_numeric_looking_cells_stay_text():
    rows = read_rows(b"Order ID,Amount\n00042,1000.50\n", "orders.csv")

    assert rows == [{"Order ID": "00042", "Amount": "1000.50"}]


def test_whitespace_only_file_has_no_data():
    with pytest.raises(FileReadError, match="No data found"):
        read_rows(b"Supplier,Product Name\n  ,  \n", "prices.csv")


def test_unsupported_extension_is_rejected():
    with pytest.raises(FileReadError, match="Only Excel/CSV"):
        read_rows(b"a,b\n1,2\n", "prices.txt")
