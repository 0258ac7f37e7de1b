from .models import Product

DEMO_PRODUCTS = [
    {"id": 1, "name": "Runner Azul", "price": 199999, "image": "/img/shoe_1.png",
     "description": "Zapatilla ligera para correr, malla transpirable.", "stock": 12},
    {"id": 2, "name": "Classic Rojo", "price": 149999, "image": "/img/shoe_2.png",
     "description": "Clásico urbano para uso diario.", "stock": 24},
    {"id": 3, "name": "Eco Verde", "price": 179999, "image": "/img/shoe_3.png",
     "description": "Materiales reciclados, cómodo y resistente.", "stock": 8},
    {"id": 4, "name": "Urban Naranja", "price": 159999, "image": "/img/shoe_4.png",
     "description": "Estilo urbano con suela de alta tracción.", "stock": 16},
    {"id": 5, "name": "Sport Morado", "price": 189999, "image": "/img/shoe_5.png",
     "description": "Para entrenamientos de alto rendimiento.", "stock": 10},
    {"id": 6, "name": "Trail Gris", "price": 209999, "image": "/img/shoe_6.png",
     "description": "Ideal para montaña y terrenos irregulares.", "stock": 7},
    {"id": 7, "name": "Pro Basketball Negro", "price": 229999, "image": "/img/shoe_7.png",
     "description": "Diseño profesional con soporte de tobillo y amortiguación avanzada.", "stock": 15},
    {"id": 8, "name": "Casual Blanco", "price": 139999, "image": "/img/shoe_8.png",
     "description": "Estilo minimalista y elegante, perfecto para cualquier ocasión.", "stock": 20},
    {"id": 9, "name": "Skate Amarillo", "price": 169999, "image": "/img/shoe_9.png",
     "description": "Suela reforzada y diseño resistente.", "stock": 11},
]


class ProductRepository:
    """Read-only, in-memory product store."""

    def __init__(self, products: list[Product]):
        ids = [p.id for p in products]
        if len(ids) != len(set(ids)):
            raise ValueError("Product ids must be unique within a catalog")
        self._products = tuple(products)
        self._by_id = {p.id: p for p in products}

    @classmethod
    def from_seed(cls, seed: list[dict] = DEMO_PRODUCTS) -> "ProductRepository":
        return cls([Product(**row) for row in seed])

    def get_all_products(self) -> list[Product]:
        return list(self._products)

    def get_product_by_id(self, product_id: int) -> Product | None:
        return self._by_id.get(product_id)
