import json
import logging

import pytest

from catalog_sync.exceptions import CategoryDataError
from catalog_sync.normalizer import merge_extended_data, normalize_category


def test_unique_url_key_example():
    node = normalize_category({"id": 5, "name": "Shoes"}, generate_url_key=True)
    assert node == {"id": 5, "name": "Shoes", "url_key": "shoes-5", "slug": "shoes-5"}


def test_custom_attributes_are_lifted_and_removed():
    node = {
        "id": 5,
        "name": "Shoes",
        "custom_attributes": [{"attribute_code": "color", "value": "red"}],
    }
    normalize_category(node)
    assert node["color"] == "red"
    assert "custom_attributes" not in node


def test_normalize_mutates_and_returns_same_object():
    node = {"id": 1, "name": "A"}
    assert normalize_category(node) is node


def test_generate_overrides_existing_url_key():
    node = normalize_category({"id": 5, "name": "Shoes", "url_key": "old"}, True)
    assert node["url_key"] == "shoes-5"
    assert node["slug"] == "shoes-5"


def test_existing_url_key_kept_without_generation():
    node = normalize_category({"id": 5, "name": "Shoes", "url_key": "footwear"}, False)
    assert node["url_key"] == "footwear"
    assert node["slug"] == "footwear"


def test_url_key_custom_attribute_is_kept_without_generation():
    node = {
        "id": 5,
        "name": "Shoes",
        "custom_attributes": [{"attribute_code": "url_key", "value": "all-shoes"}],
    }
    normalize_category(node, False)
    assert node["url_key"] == node["slug"] == "all-shoes"


def test_missing_url_key_derived_without_generation():
    node = normalize_category({"id": 5, "name": "Shoes"}, False)
    assert node["url_key"] == node["slug"] == "shoes-5"


def test_missing_name_is_data_integrity_error():
    with pytest.raises(CategoryDataError):
        normalize_category({"id": 5}, True)


def test_missing_name_tolerated_when_url_key_present_and_not_generating():
    node = normalize_category({"id": 5, "url_key": "x"}, False)
    assert node["slug"] == "x"


def test_attribute_without_code_is_skipped():
    node = {
        "id": 1,
        "name": "A",
        "custom_attributes": [{"value": "orphan"}, {"attribute_code": "b", "value": 2}],
    }
    normalize_category(node)
    assert node["b"] == 2
    assert "orphan" not in node.values()


def test_attribute_without_code_is_logged_with_category_id(caplog):
    node = {"id": 41, "name": "A", "custom_attributes": [{"value": "orphan"}]}

    with caplog.at_level(logging.WARNING, logger="catalog_sync.normalizer"):
        normalize_category(node)

    assert caplog.messages == [
        "Skipping custom attribute without attribute_code on category 41"
    ]


@pytest.mark.parametrize("generate", [True, False])
def test_normalization_is_idempotent(generate):
    node = {
        "id": 9,
        "name": "Kids & Baby",
        "url_key": "kids",
        "custom_attributes": [{"attribute_code": "is_anchor", "value": "1"}],
    }
    once = json.dumps(normalize_category(node, generate), sort_keys=True)
    twice = json.dumps(normalize_category(node, generate), sort_keys=True)
    assert once == twice


def test_merge_overwrites_fields_and_keeps_children():
    children = [{"id": 6, "name": "Running"}]
    node = {"id": 5, "name": "Shoes", "children_data": children, "level": 2}
    extended = {
        "id": 5,
        "name": "Shoes!",
        "level": 3,
        "children_data": [],
        "custom_attributes": [{"attribute_code": "description", "value": "d"}],
    }

    merge_extended_data(node, extended, True)

    assert node["children_data"] is children
    assert node["name"] == "Shoes!"
    assert node["level"] == 3
    assert node["description"] == "d"
    assert node["url_key"] == node["slug"] == "shoes-5"
    assert "custom_attributes" not in node


def test_merge_does_not_mutate_fetched_record():
    extended = {"id": 5, "name": "Shoes", "custom_attributes": []}
    merge_extended_data({"id": 5}, extended, True)
    assert "custom_attributes" in extended


def test_merge_keeps_node_url_key_when_not_generating():
    node = {"id": 5, "name": "Shoes", "url_key": "footwear", "slug": "footwear"}
    merge_extended_data(node, {"id": 5, "name": "Shoes", "position": 1}, False)
    assert node["url_key"] == node["slug"] == "footwear"
    assert node["position"] == 1
