"""Editable static business details and fallback menu catalog."""

from __future__ import annotations

from fantasteak.models import Category, MenuItem

BUSINESS_NAME = "FANTASTEAK"
TAGLINE = "Petualangan Rasa, Teman Bercerita"
ADDRESS_LINES: tuple[str, ...] = (
    "Depan Gedung Pusyan Gatra Kencana",
    "Jl. Lettu Suwolo, RT.18/RW.03",
    "Ngrowo, Bojonegoro, Jawa Timur 62116",
)
CONTACT_LINE = "WA: 0858-5420-3343"

CLOSING_LINES: tuple[str, ...] = (
    "Terima kasih telah menjadi bagian",
    "dari cerita kami hari ini.",
    "Sampai jumpa di petualangan rasa berikutnya!",
)

PLACEHOLDER_CUSTOMER = "Pelanggan"
PLACEHOLDER_ITEM = "Item"
PLACEHOLDER_TABLE = "-"

ORDER_TYPE_LABELS: dict[str, str] = {
    "DINE_IN": "DINE IN",
    "TAKEAWAY": "TAKEAWAY",
    "PRE_ORDER": "PRE ORDER",
}

# Used when the store has no catalog rows yet.
CATEGORIES: list[Category] = [
    Category("1", "Signature Steak"),
    Category("2", "Premium Cut"),
    Category("3", "Minuman"),
    Category("4", "Pencuci Mulut"),
]

MENU: list[MenuItem] = [
    MenuItem(
        id="m1",
        category_id="1",
        name="Wagyu Ribeye MB9+",
        price=450000,
        description="Bistik Wagyu premium dengan marbling sempurna, disajikan dengan truffle fries.",
        badge="Paling Laris",
    ),
    MenuItem(
        id="m2",
        category_id="1",
        name="Sirloin Black Angus",
        price=275000,
        description="Steak Sirloin 200g dari sapi Black Angus pilihan.",
        badge="Favorit",
    ),
    MenuItem(
        id="m3",
        category_id="2",
        name="Tenderloin Local Heritage",
        price=185000,
        description="Daging khas dalam lokal berkualitas dengan tekstur lembut.",
    ),
    MenuItem(
        id="m4",
        category_id="3",
        name="Iced Lychee Tea",
        price=35000,
        description="Teh segar dengan buah leci asli.",
        badge="Paket Promo",
    ),
]
