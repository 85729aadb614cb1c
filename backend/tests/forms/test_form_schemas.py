import json

import pytest

from pricebook.forms.exceptions import InvalidFormValueException, UnknownFormKindException
from pricebook.forms.schemas import (
    FIELD_SCHEMAS,
    FieldDescriptor,
    describe_form,
    parse_form_values,
    resolve_field_value,
)

def test_every_kind_targets_a_catalog_collection():
    assert {kind: schema.collection for kind, schema in FIELD_SCHEMAS.items()} == {
        "mfg": "manufacturers",
        "line": "productLines",
        "prod": "products",
        "addon": "addons",
    }

def test_resolve_field_value_uses_callbacks():
    readonly = FIELD_SCHEMAS["prod"].fields[1]
    assert resolve_field_value(readonly, {}, {"productLineName": "Premium"}) == "Premium"
    assert resolve_field_value(readonly, {}) == "N/A"

    plain = FieldDescriptor(key="name")
    assert resolve_field_value(plain, {"name": "Acme"}) == "Acme"
    assert resolve_field_value(FieldDescriptor(type="section"), {"name": "Acme"}) == ""

    formatted = FieldDescriptor(key="allowedProductTypes", formatter=lambda value, item, context: ", ".join(value or []))
    assert resolve_field_value(formatted, {"allowedProductTypes": ["Window", "Door"]}) == "Window, Door"

def test_describe_form_strips_callbacks_and_resolves_values():
    item = {"id": "lowe", "name": "Low-E", "pricingModel": "UI", "uiRate": 1.5,
            "allowedProductTypes": ["Window"], "mandatory": False}
    described = describe_form("addon", item)

    # Sérialisable tel quel : aucun callable ne subsiste
    json.dumps(described)
    assert described["title"] == "Modifier l'option"
    fields = described["fields"]
    assert fields[0]["resolvedValue"] == "Low-E"

    pricing_group = fields[2]
    assert pricing_group["modelValue"] == "UI"
    assert pricing_group["uiField"]["resolvedValue"] == 1.5
    assert pricing_group["flatField"]["resolvedValue"] is None

    group = fields[-1]
    assert group["className"] == "form-row"
    assert group["fields"][0]["resolvedValue"] == "Window"
    assert "value" not in group["fields"][0]
    assert "formatter" not in group["fields"][0]

def test_describe_form_for_new_entity():
    described = describe_form("prod")
    assert described["fields"][0]["resolvedValue"] == "N/A"
    assert described["fields"][2]["resolvedValue"] is None

def test_unknown_form_kind():
    with pytest.raises(UnknownFormKindException):
        describe_form("widget")
    with pytest.raises(UnknownFormKindException):
        parse_form_values("widget", {})

def test_parse_form_values_converts_submitted_strings():
    payload = parse_form_values("addon", {
        "name": "  Grilles  ",
        "pricingModel": "FLAT",
        "uiRate": "",
        "flatPrice": "49.99",
        "exclusiveGroup": "",
        "mandatory": "on",
        "allowedProductTypes": "Window, Door, ",
        "allowedProductLines": "",
        "minSize": "12",
    })
    assert payload == {
        "name": "Grilles",
        "pricingModel": "FLAT",
        "uiRate": None,
        "flatPrice": 49.99,
        "exclusiveGroup": None,
        "mandatory": True,
        "hiddenFromCustomer": False,
        "isJobBased": False,
        "allowedProductTypes": ["Window", "Door"],
        "allowedProductLines": None,
        "minSize": 12.0,
    }

def test_parse_form_values_integer_bounds():
    payload = parse_form_values("prod", {"minimumUI": "65", "maximumUI": ""})
    assert payload == {"minimumUI": 65, "maximumUI": None}
    assert isinstance(payload["minimumUI"], int)

def test_parse_form_values_rejects_bad_number():
    with pytest.raises(InvalidFormValueException) as exc_info:
        parse_form_values("prod", {"uiRate": "dix"})
    assert exc_info.value.key == "uiRate"

@pytest.mark.parametrize("key, raw", [
    ("minimumUI", "inf"),
    ("minimumUI", "nan"),
    ("uiRate", "-inf"),
    ("flatPrice", "1e999"),
])
def test_parse_form_values_rejects_non_finite_number(key, raw):
    with pytest.raises(InvalidFormValueException) as exc_info:
        parse_form_values("prod", {key: raw})
    assert exc_info.value.key == key
