from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from fantasteak import data
from fantasteak.admin_app import AdminApp
from fantasteak.customer_app import ALL_CATEGORIES, CustomerApp, categories_from_rows, menu_in_category


def test_menu_filtered_by_category():
    assert menu_in_category(data.MENU, ALL_CATEGORIES.id) == data.MENU
    assert [item.id for item in menu_in_category(data.MENU, "1")] == ["m1", "m2"]
    assert [item.id for item in menu_in_category(data.MENU, "3")] == ["m4"]
    assert menu_in_category(data.MENU, "4") == []


def test_categories_from_store_rows(store):
    assert store.select_categories() == []

    rows = [{"id": 2, "name": "Premium Cut"}, {"id": "1", "name": "Signature Steak"}]
    assert [(category.id, category.name) for category in categories_from_rows(rows)] == [
        ("2", "Premium Cut"),
        ("1", "Signature Steak"),
    ]


def test_customer_menu_starts_unfiltered_and_cycles_through_categories(store):
    app = CustomerApp(store)

    assert app.categories[0] is ALL_CATEGORIES
    assert app.categories[1:] == data.CATEGORIES
    assert app.visible_menu() == data.MENU

    app.category_index = 2
    assert [item.name for item in app.visible_menu()] == ["Tenderloin Local Heritage"]


@pytest.mark.asyncio
async def test_admin_cancel_is_ignored_while_a_dialog_is_open(store, budi_order):
    sync = MagicMock()
    sync.orders = [budi_order]
    app = AdminApp(store, sync=sync)
    app.modal_open = lambda: True
    app._selected = lambda: budi_order

    with patch("fantasteak.admin_app.apply_transition", new=AsyncMock()) as apply:
        await app.action_cancel_order()

    apply.assert_not_called()
