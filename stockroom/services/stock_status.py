IN_STOCK = "in_stock"
LOW_STOCK = "low_stock"
OUT_OF_STOCK = "out_of_stock"
STOCK_STATUSES = (IN_STOCK, LOW_STOCK, OUT_OF_STOCK)

# Quantities strictly below this (and above zero) are low stock.
LOW_STOCK_THRESHOLD = 10


def derive_status(quantity: int) -> str:
    if quantity <= 0:
        return OUT_OF_STOCK
    if quantity < LOW_STOCK_THRESHOLD:
        return LOW_STOCK
    return IN_STOCK


def is_low_stock(quantity: int) -> bool:
    return 0 < quantity < LOW_STOCK_THRESHOLD


def is_out_of_stock(quantity: int) -> bool:
    return quantity <= 0
