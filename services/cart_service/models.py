from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String
from shared.config.database import Base


class CartLine(Base):
    """One pending purchase intent, keyed by (user, product, shop)."""

    __tablename__ = "cart_items"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_cart_items_quantity_positive"),)

    user_id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), primary_key=True)
    shop = Column(String, primary_key=True)
    quantity = Column(Integer, nullable=False)
