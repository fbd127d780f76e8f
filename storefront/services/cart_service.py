from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.orm import Session

from storefront.domain.entities import CatalogProduct
from storefront.domain.errors import CartLineNotFound, ProductNotFound, ValidationFailed
from storefront.domain.owner import CartOwner, describe
from storefront.repos.cart_repo import CartRepo
from storefront.services.product_client import ProductClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _opt(value: str | None) -> str:
    # w bazie "" zamiast NULL dla rozmiaru / koloru
    return (value or "").strip()


def _empty_cart() -> Dict[str, Any]:
    return {"items": [], "subtotal": Decimal("0.00"), "item_count": 0}


class CartService:
    """
    Prosta implementacja cqrs i proste use case dla domeny cart
    commands (add, update_quantity, remove) modyfikuja stan
    query (get) tylko odczyt, zawsze z aktualnymi cenami z katalogu
    """

    def __init__(self, db: Session, product_client: ProductClient):
        self.repo = CartRepo(db)
        self.product_client = product_client

    #query - odczyt
    def get_cart(self, owner: CartOwner | None) -> Dict[str, Any]:
        # brak wlasciciela -> pusty koszyk, nie blad (anonimowe przegladanie)
        if owner is None:
            return _empty_cart()

        lines = self.repo.get_lines(owner)
        if not lines:
            return _empty_cart()

        products: dict[int, CatalogProduct | None] = {}
        items = []
        subtotal = Decimal("0.00")
        item_count = 0

        for line in lines:
            if line.product_id not in products:
                products[line.product_id] = self.product_client.fetch_product(line.product_id)
            product = products[line.product_id]

            line_total = Decimal("0.00")
            if product is not None:
                line_total = product.price * line.quantity
                subtotal += line_total
                item_count += line.quantity

            items.append(
                {
                    "id": line.id,
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "size": line.size or None,
                    "color": line.color or None,
                    "product": None if product is None else {
                        "id": product.id,
                        "name": product.name,
                        "price": product.price,
                        "image_url": product.image_url,
                        "sku": product.sku,
                    },
                    "available": product is not None,
                    "line_total": line_total,
                }
            )

        #dict przeksztalcany w jsona
        return {"items": items, "subtotal": subtotal, "item_count": item_count}

    #commands
    def add_product(
        self,
        owner: CartOwner,
        product_id: int,
        quantity: int = 1,
        size: str | None = None,
        color: str | None = None,
    ) -> Dict[str, Any]:

        # Walidacje przed jakakolwiek zmiana
        if product_id <= 0:
            raise ValidationFailed("product_id", "Nieprawidlowe ID produktu")
        if quantity < 1:
            raise ValidationFailed("quantity", "Ilosc musi byc wieksza niz 0")

        logger.info(f"Pobieranie danych produktu {product_id} z katalogu")
        if self.product_client.fetch_product(product_id) is None:
            raise ProductNotFound(f"Produkt {product_id} nie istnieje")

        try:
            # upsert z inkrementacja - bez read-then-write
            self.repo.add_quantity(owner, product_id, quantity, _opt(size), _opt(color))
            self.repo.commit()
        except Exception as e:
            logger.error(f"Blad podczas dodawania produktu: {e}")
            self.repo.rollback()
            raise

        logger.info(f"Produkt {product_id} x{quantity} dodany do koszyka {describe(owner)}")

        return self.get_cart(owner)

    def update_quantity(self, owner: CartOwner, line_id: int, quantity: int) -> Dict[str, Any]:
        # quantity <= 0 to to samo co usuniecie
        if quantity <= 0:
            return self.remove_line(owner, line_id)

        rowcount = self.repo.set_quantity(owner, line_id, quantity)
        if rowcount == 0:
            self.repo.rollback()
            raise CartLineNotFound(f"Linia koszyka {line_id} nie istnieje")

        self.repo.commit()
        logger.info(f"Linia {line_id} koszyka {describe(owner)} ma teraz ilosc {quantity}")

        return self.get_cart(owner)

    def remove_line(self, owner: CartOwner, line_id: int) -> Dict[str, Any]:
        #idempotentne - brak linii to nie blad
        rowcount = self.repo.delete_line(owner, line_id)
        self.repo.commit()

        if rowcount:
            logger.info(f"Linia {line_id} usunieta z koszyka {describe(owner)}")

        return self.get_cart(owner)
