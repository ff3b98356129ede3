from sakany.listings.models import SearchFilters
from sakany.matching.models import SimpleQuizPreferences
from sakany.matching.strict_filter import apply_strict_filter, matches_simple_quiz, to_search_filters


def test_all_three_answers_must_hold():
    prefs = SimpleQuizPreferences(residence_type="apartment", family_status="single", budget=500000)
    props = [
        {"id": 1, "property_type": "apartment", "bedrooms": 1, "price": 400000},
        {"id": 2, "property_type": "apartment", "bedrooms": 2, "price": 300000},
        {"id": 3, "property_type": "house", "bedrooms": 1, "price": 200000},
    ]
    assert [p["id"] for p in apply_strict_filter(props, prefs)] == [1]


def test_type_match_is_exact_and_case_insensitive():
    prefs = SimpleQuizPreferences(residence_type="Villa")
    assert matches_simple_quiz({"property_type": "VILLA"}, prefs)
    assert not matches_simple_quiz({"property_type": "villa-complex"}, prefs)


def test_family_with_children_needs_two_or_more_bedrooms():
    prefs = SimpleQuizPreferences(family_status="family_with_children")
    assert matches_simple_quiz({"bedrooms": 2}, prefs)
    assert matches_simple_quiz({"bedrooms": 4}, prefs)
    assert not matches_simple_quiz({"bedrooms": 1}, prefs)


def test_married_needs_exactly_one_bedroom():
    prefs = SimpleQuizPreferences(family_status="married")
    assert matches_simple_quiz({"bedrooms": 1}, prefs)
    assert not matches_simple_quiz({"bedrooms": 3}, prefs)


def test_budget_is_inclusive_ceiling():
    prefs = SimpleQuizPreferences(budget=100)
    assert matches_simple_quiz({"price": 100}, prefs)
    assert not matches_simple_quiz({"price": 101}, prefs)


def test_unset_answers_impose_nothing():
    prefs = SimpleQuizPreferences()
    assert matches_simple_quiz({}, prefs)
    assert matches_simple_quiz({"property_type": "land", "bedrooms": 0, "price": 10**9}, prefs)
    assert matches_simple_quiz({"price": 10**9}, SimpleQuizPreferences(budget=-5))


def test_missing_fields_fail_constraints():
    assert not matches_simple_quiz({}, SimpleQuizPreferences(residence_type="house"))
    assert not matches_simple_quiz({}, SimpleQuizPreferences(family_status="single"))
    assert not matches_simple_quiz({"price": "cheap"}, SimpleQuizPreferences(budget=10))


def test_filter_is_stable():
    prefs = SimpleQuizPreferences(budget=50)
    props = [{"id": i, "price": p} for i, p in enumerate([10, 90, 20, 30, 60])]
    assert [p["id"] for p in apply_strict_filter(props, prefs)] == [0, 2, 3]


def test_search_filters_from_answers():
    prefs = SimpleQuizPreferences(residence_type="house", family_status="family_with_children", budget=2000)
    assert to_search_filters(prefs) == {"property_type": "house", "min_bedrooms": 2, "max_price": 2000}
    assert to_search_filters(SimpleQuizPreferences(family_status="single")) == {"min_bedrooms": 1}
    assert to_search_filters(SimpleQuizPreferences()) == {}


def test_search_filters_are_accepted_by_search():
    prefs = SimpleQuizPreferences(residence_type="villa", family_status="family_with_children", budget=900)
    filters = SearchFilters(**to_search_filters(prefs))
    assert filters.property_type == "villa"
    assert filters.min_bedrooms == 2
    assert filters.max_price == 900
