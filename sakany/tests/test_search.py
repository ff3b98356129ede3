from sakany.listings.models import SearchFilters
from sakany.listings.search import (
    featured_properties,
    listing_metadata,
    recent_properties,
    search_properties,
)


def _prop(pid, **kw):
    base = {
        "id": pid,
        "title": f"Listing {pid}",
        "description": "",
        "location": "Cairo",
        "property_type": "apartment",
        "price": 100000,
        "bedrooms": 2,
        "bathrooms": 1,
        "area": 100,
        "amenities": [],
        "for_sale": True,
        "for_rent": False,
        "published": True,
        "verified": True,
        "status": "active",
        "featured": False,
        "created_at": 1000,
    }
    return {**base, **kw}


CATALOGUE = [
    _prop("a", price=300000, location="Maadi", amenities=["pool", "gym"], created_at=1),
    _prop("b", price=150000, property_type="house", bedrooms=4, created_at=2),
    _prop("c", price=90000, title="Sunny studio", property_type="studio", for_rent=True, for_sale=False, created_at=3),
    _prop("d", price=500000, verified=False, created_at=4),
    _prop("e", price=None, amenities=["pool"], created_at=5),
    _prop("f", price=220000, status="approved", featured=True, area=250, created_at=6),
]


def _ids(page):
    return [p["id"] for p in page.properties]


def test_hidden_records_never_appear():
    page = search_properties(CATALOGUE, SearchFilters())
    assert "d" not in _ids(page)
    assert page.total == 5


def test_default_sort_is_newest_first():
    page = search_properties(CATALOGUE, SearchFilters())
    assert _ids(page) == ["f", "e", "c", "b", "a"]


def test_price_range_excludes_missing_prices():
    page = search_properties(CATALOGUE, SearchFilters(min_price=100000, max_price=300000))
    assert sorted(_ids(page)) == ["a", "b", "f"]


def test_sort_by_price_ascending_puts_missing_last():
    page = search_properties(CATALOGUE, SearchFilters(sort_by="price", sort_direction="asc"))
    assert _ids(page) == ["c", "b", "f", "a", "e"]


def test_sort_by_price_descending_puts_missing_last():
    page = search_properties(CATALOGUE, SearchFilters(sort_by="price", sort_direction="DESC"))
    assert _ids(page) == ["a", "f", "b", "c", "e"]


def test_invalid_sort_falls_back_to_created_at_desc():
    filters = SearchFilters(sort_by="title; drop table", sort_direction="sideways")
    assert filters.sort_by == "created_at"
    assert filters.sort_direction == "desc"
    assert _ids(search_properties(CATALOGUE, filters))[0] == "f"


def test_text_query_checks_title_description_and_location():
    assert _ids(search_properties(CATALOGUE, SearchFilters(q="sunny"))) == ["c"]
    assert _ids(search_properties(CATALOGUE, SearchFilters(q="MAADI"))) == ["a"]


def test_property_type_all_means_any():
    assert search_properties(CATALOGUE, SearchFilters(property_type="all")).total == 5
    assert _ids(search_properties(CATALOGUE, SearchFilters(property_type="House"))) == ["b"]


def test_amenities_are_all_required():
    assert sorted(_ids(search_properties(CATALOGUE, SearchFilters(amenities=["pool"])))) == ["a", "e"]
    assert _ids(search_properties(CATALOGUE, SearchFilters(amenities=["Pool", "gym"]))) == ["a"]


def test_sale_and_rent_flags():
    assert _ids(search_properties(CATALOGUE, SearchFilters(for_rent=True))) == ["c"]
    assert "c" not in _ids(search_properties(CATALOGUE, SearchFilters(for_sale=True)))


def test_bedrooms_and_area():
    assert _ids(search_properties(CATALOGUE, SearchFilters(min_bedrooms=3))) == ["b"]
    assert _ids(search_properties(CATALOGUE, SearchFilters(min_area=200))) == ["f"]


def test_pagination():
    page = search_properties(CATALOGUE, SearchFilters(page=2, page_size=2))
    assert _ids(page) == ["c", "b"]
    assert page.total == 5
    assert page.total_pages == 3
    assert search_properties(CATALOGUE, SearchFilters(page=9, page_size=2)).properties == []


def test_empty_catalogue():
    page = search_properties([], SearchFilters())
    assert page.total == 0
    assert page.total_pages == 0


def test_featured_only_visible_and_flagged():
    assert [p["id"] for p in featured_properties(CATALOGUE + [_prop("g", featured=True, verified=False)])] == ["f"]


def test_recent_is_newest_visible_first():
    assert [p["id"] for p in recent_properties(CATALOGUE, limit=3)] == ["f", "e", "c"]


def test_metadata_from_visible_records_only():
    meta = listing_metadata(CATALOGUE + [_prop("z", property_type="castle", verified=False)])
    assert meta["property_types"] == ["apartment", "house", "studio"]
    assert meta["amenities"] == ["gym", "pool"]
    assert meta["locations"] == ["Cairo", "Maadi"]
