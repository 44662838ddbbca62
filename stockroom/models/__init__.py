from stockroom.models.user import User
from stockroom.models.category import Category
from stockroom.models.product import Product
from stockroom.models.stock_movement import StockMovement
