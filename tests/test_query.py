"""
Tests for listing, searching, low-stock and statistics queries.
"""

import pytest

from pantry.exceptions import InvalidArgumentError


class TestListItems:
    """Search, filter, sort and pagination."""

    @pytest.fixture(autouse=True)
    def setup(self, service, item_data):
        self.service = service
        self.item_data = item_data
        for name, category, quantity, cost in [
            ("Mozzarella Cheese", "Dairy", 10, 8.99),
            ("Parmesan", "Cheese", 2, 18.5),
            ("Tomato Sauce", "Sauces", 25, 3.25),
            ("Fresh Basil", "Herbs", 0.5, 2.0),
        ]:
            service.create_item(
                item_data(name=name, category=category, quantity=quantity, cost_price=cost),
                "chef_anna",
            )

    def _names(self, **kwargs):
        items, _ = self.service.list_items(**kwargs)
        return [item.name for item in items]

    def test_search_is_case_insensitive_over_name_and_category(self):
        assert sorted(self._names(search="cheese")) == ["Mozzarella Cheese", "Parmesan"]
        assert self._names(search="  SAUCE ") == ["Tomato Sauce"]

    def test_search_with_no_match(self):
        items, total = self.service.list_items(search="saffron")

        assert items == []
        assert total == 0

    def test_blank_search_matches_everything(self):
        _, total = self.service.list_items(search="   ")

        assert total == 4

    def test_wildcards_in_search_are_literal(self):
        self.service.create_item(self.item_data(name="100% Orange Juice", category="Drinks"), "chef_anna")

        assert self._names(search="%") == ["100% Orange Juice"]
        assert self._names(search="_") == []

    def test_category_filter_is_exact(self):
        assert self._names(category="Dairy") == ["Mozzarella Cheese"]
        assert self._names(category="dairy") == []

    def test_search_and_category_combine(self):
        assert self._names(search="cheese", category="Cheese") == ["Parmesan"]

    def test_sort_by_quantity(self):
        assert self._names(sort_by="quantity", sort_order="asc") == [
            "Fresh Basil", "Parmesan", "Mozzarella Cheese", "Tomato Sauce"
        ]
        assert self._names(sort_by="quantity", sort_order="desc") == [
            "Tomato Sauce", "Mozzarella Cheese", "Parmesan", "Fresh Basil"
        ]

    def test_sort_by_name_and_cost(self):
        assert self._names(sort_by="name", sort_order="asc")[0] == "Fresh Basil"
        assert self._names(sort_by="costPrice", sort_order="desc")[0] == "Parmesan"

    def test_default_sort_is_most_recently_updated(self):
        parmesan = self.service.list_items(search="parmesan")[0][0]
        self.service.adjust_quantity(parmesan.item_id, 1, "chef_ben")

        assert self._names()[0] == "Parmesan"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"sort_by": "category"},
            {"sort_by": "updated_at"},
            {"sort_order": "up"},
            {"page": 0},
            {"page_size": 0},
            {"page_size": 101},
        ],
    )
    def test_invalid_listing_arguments(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            self.service.list_items(**kwargs)


class TestPagination:

    @pytest.fixture(autouse=True)
    def setup(self, service, item_data):
        self.service = service
        for i in range(25):
            service.create_item(item_data(name=f"Item {i:02d}", quantity=i), "chef_anna")

    def test_last_partial_page(self):
        items, total = self.service.list_items(sort_by="name", sort_order="asc", page=3, page_size=10)

        assert total == 25
        assert [item.name for item in items] == [f"Item {i}" for i in range(20, 25)]

    def test_page_past_the_end_is_empty(self):
        items, total = self.service.list_items(page=4, page_size=10)

        assert items == []
        assert total == 25

    def test_pages_do_not_overlap(self):
        seen = []
        for page in (1, 2, 3):
            items, _ = self.service.list_items(sort_by="quantity", sort_order="asc", page=page, page_size=10)
            seen.extend(item.item_id for item in items)

        assert len(seen) == len(set(seen)) == 25

    def test_ties_are_broken_stably(self):
        # All 25 share one cost price
        first, _ = self.service.list_items(sort_by="costPrice", page=1, page_size=25)
        again, _ = self.service.list_items(sort_by="costPrice", page=1, page_size=25)

        assert [i.item_id for i in first] == [i.item_id for i in again]
        assert [i.item_id for i in first] == sorted(i.item_id for i in first)


class TestCategoriesAndStats:

    @pytest.fixture(autouse=True)
    def setup(self, service, item_data):
        self.service = service
        self.item_data = item_data

    def test_empty_inventory(self):
        stats = self.service.get_stats()

        assert self.service.get_categories() == []
        assert self.service.get_low_stock_items() == []
        assert stats.total_items == 0
        assert stats.total_value == 0

    def test_categories_are_distinct_and_sorted(self):
        for name, category in [("Basil", "Herbs"), ("Brie", "Dairy"), ("Feta", "Dairy")]:
            self.service.create_item(self.item_data(name=name, category=category), "chef_anna")

        assert self.service.get_categories() == ["Dairy", "Herbs"]

    def test_low_stock_includes_items_at_threshold(self):
        self.service.create_item(self.item_data(name="Eggs", quantity=12, reorder_threshold=12), "chef_anna")
        self.service.create_item(self.item_data(name="Flour", quantity=1, reorder_threshold=5), "chef_anna")
        self.service.create_item(self.item_data(name="Sugar", quantity=9, reorder_threshold=5), "chef_anna")

        low = self.service.get_low_stock_items()

        assert [item.name for item in low] == ["Flour", "Eggs"]
        assert all(item.is_low_stock for item in low)

    def test_stats(self):
        self.service.create_item(
            self.item_data(name="Flour", category="Baking", quantity=4, reorder_threshold=5, cost_price=1.25),
            "chef_anna",
        )
        self.service.create_item(
            self.item_data(name="Olive Oil", category="Oils", quantity=3, reorder_threshold=1, cost_price=12),
            "chef_anna",
        )

        stats = self.service.get_stats()

        assert stats.total_items == 2
        assert stats.low_stock_items == 1
        assert stats.total_quantity == 7
        assert stats.total_value == 41.0
        assert stats.category_count == 2
        assert stats.to_api() == {
            "totalItems": 2,
            "lowStockItems": 1,
            "totalQuantity": 7.0,
            "totalValue": 41.0,
            "categoryCount": 2,
        }
