import pytest

from stockroom.services.stock_status import (
    IN_STOCK,
    LOW_STOCK,
    LOW_STOCK_THRESHOLD,
    OUT_OF_STOCK,
    STOCK_STATUSES,
    derive_status,
    is_low_stock,
    is_out_of_stock,
)


@pytest.mark.parametrize(
    ("quantity", "expected"),
    [
        (-5, OUT_OF_STOCK),
        (0, OUT_OF_STOCK),
        (1, LOW_STOCK),
        (9, LOW_STOCK),
        (10, IN_STOCK),
        (11, IN_STOCK),
        (10_000, IN_STOCK),
    ],
)
def test_derive_status_thresholds(quantity, expected):
    assert derive_status(quantity) == expected


def test_derive_status_partitions_every_quantity():
    for quantity in range(-20, 200):
        status = derive_status(quantity)
        assert (status == OUT_OF_STOCK) == (quantity <= 0)
        assert (status == LOW_STOCK) == (0 < quantity < LOW_STOCK_THRESHOLD)
        assert (status == IN_STOCK) == (quantity >= LOW_STOCK_THRESHOLD)
        assert is_low_stock(quantity) == (status == LOW_STOCK)
        assert is_out_of_stock(quantity) == (status == OUT_OF_STOCK)


def test_derived_statuses_are_the_known_set():
    assert {derive_status(quantity) for quantity in range(-1, 20)} == set(STOCK_STATUSES)
