"""
Unit tests for attribute definitions.
"""
from datetime import date
from decimal import Decimal

import pytest

from internal.domain.attribute import AttributeDefinition, AttributeKind, AttributeType
from internal.domain.errors import DomainValidationError, InvalidFilterValueError


class TestAttributeDefinition:
    """Tests for AttributeDefinition."""

    @pytest.mark.parametrize(
        "attribute_type,column",
        [
            ("price", "float_value"),
            ("boolean", "boolean_value"),
            ("select", "integer_value"),
            ("datetime", "datetime_value"),
            ("date", "date_value"),
            ("text", "text_value"),
            ("multiselect", "text_value"),
            ("checkbox", "text_value"),
        ],
    )
    def test_type_determines_value_column(self, attribute_type, column):
        definition = AttributeDefinition.from_type(id=1, code="a", type=attribute_type)
        assert definition.column_name == column

    def test_only_price_attributes_are_ranges(self):
        price = AttributeDefinition.from_type(id=1, code="cost", type="price")
        color = AttributeDefinition.from_type(id=2, code="color", type="select")
        assert price.kind is AttributeKind.RANGE
        assert color.kind is AttributeKind.SET

    def test_unknown_type_raises_value_error(self):
        with pytest.raises(ValueError):
            AttributeDefinition.from_type(id=1, code="a", type="hologram")

    def test_unknown_column_is_rejected(self):
        with pytest.raises(DomainValidationError):
            AttributeDefinition(
                id=1,
                code="a",
                type=AttributeType.TEXT,
                column_name="text_value; DROP TABLE products",
            )

    def test_coerce_to_column_type(self, color_attribute):
        assert color_attribute.coerce(" 5 ") == 5
        flag = AttributeDefinition.from_type(id=3, code="new", type="boolean")
        assert flag.coerce("yes") is True
        assert flag.coerce("0") is False
        released = AttributeDefinition.from_type(id=4, code="released", type="date")
        assert released.coerce("2024-03-01") == date(2024, 3, 1)
        cost = AttributeDefinition.from_type(id=5, code="cost", type="price")
        assert cost.coerce("9.5") == Decimal("9.5")

    def test_uncoercible_token_raises_error(self, color_attribute):
        with pytest.raises(InvalidFilterValueError) as exc_info:
            color_attribute.coerce("red")
        assert exc_info.value.parameter == "color"

    def test_dict_representation(self, color_attribute):
        data = color_attribute.to_dict()
        assert data == {
            "id": 23,
            "code": "color",
            "type": "select",
            "column_name": "integer_value",
            "is_filterable": True,
        }
        assert AttributeDefinition.from_dict(data) == color_attribute
