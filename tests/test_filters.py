from storefront.domain.filters import (
    BoolFilter,
    NumberFilter,
    ProductQuery,
    TextFilter,
    parse_filter_value,
    parse_product_query,
    to_api_params,
)


def test_parse_filter_value():
    assert parse_filter_value("true") == BoolFilter(value=True)
    assert parse_filter_value("false") == BoolFilter(value=False)
    assert parse_filter_value("42") == NumberFilter(value=42)
    assert parse_filter_value("-1.5") == NumberFilter(value=-1.5)
    assert parse_filter_value("red") == TextFilter(value="red")
    assert parse_filter_value("True") == TextFilter(value="True")
    assert parse_filter_value("") == TextFilter(value="")
    assert parse_filter_value("Infinity") == TextFilter(value="Infinity")
    assert parse_filter_value("NaN") == TextFilter(value="NaN")


def test_last_value_wins_and_reserved_keys():
    query = parse_product_query([("color", "red"), ("color", "blue"), ("page", "3"), ("ordering", "name")])
    assert query.page == 3
    assert query.ordering == "name"
    assert query.filters == {"color": TextFilter(value="blue")}


def test_invalid_page_defaults_to_first():
    assert parse_product_query([("page", "abc")]).page == 1
    assert parse_product_query([("page", "-4")]).page == 1


def test_to_api_params_renders_typed_values():
    query = ProductQuery(
        filters={
            "size": NumberFilter(value=42.0),
            "weight": NumberFilter(value=0.5),
            "waterproof": BoolFilter(value=False),
            "brand": TextFilter(value=""),
        }
    )
    assert to_api_params(query) == {"page": "1", "size": "42", "weight": "0.5", "waterproof": "false"}


def test_filters_round_trip_through_json():
    query = parse_product_query([("size", "42"), ("sale", "true")])
    restored = ProductQuery.model_validate_json(query.model_dump_json())
    assert restored == query
