"""
In-memory shopping cart.

A cart is an ordered list of lines, one per product id. Each line keeps the
name, price and image the product had when it was first added (the price
snapshot is what the shopper is charged at checkout). Totals are always
derived from the lines, never stored.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, Optional


@dataclass
class CartLine:
    product_id: str
    name: str
    price: Decimal
    quantity: int = 1
    image_url: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Cart:

    def __init__(self, lines: Optional[list[CartLine]] = None):
        self._lines: list[CartLine] = []
        for line in lines or []:
            self.add(line.product_id, line.name, line.price, line.quantity, line.image_url)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def total_price(self) -> Decimal:
        return sum((line.line_total for line in self._lines), Decimal("0"))

    def get(self, product_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    def add(
        self,
        product_id: str,
        name: str,
        price: Decimal,
        quantity: int = 1,
        image_url: Optional[str] = None,
    ) -> CartLine:
        """Adds `quantity` units, merging into the existing line for the product."""
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        existing = self.get(product_id)
        if existing:
            existing.quantity += quantity
            return existing

        line = CartLine(
            product_id=product_id,
            name=name,
            price=Decimal(price),
            quantity=quantity,
            image_url=image_url,
        )
        self._lines.append(line)
        return line

    def remove(self, product_id: str) -> None:
        self._lines = [line for line in self._lines if line.product_id != product_id]

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """Sets the line quantity; zero or below drops the line."""
        if quantity <= 0:
            self.remove(product_id)
            return

        line = self.get(product_id)
        if line:
            line.quantity = quantity

    def clear(self) -> None:
        self._lines = []
