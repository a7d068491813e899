import pytest
from decimal import Decimal

from apps.orders.exceptions import InvalidQuantityError
from apps.orders.pricing import (
    fits_total,
    format_amount,
    is_decimal,
    line_item_total,
    order_total,
)


PER_AREA_SERVICE = {'price': Decimal('50'), 'pricing_mode': 'perArea'}
PER_UNIT_SERVICE = {'price': Decimal('2.50'), 'pricing_mode': 'perUnit'}


class TestIsDecimal:

    @pytest.mark.parametrize('value', ['0', '12', '3.5', '3.50', Decimal('2.00'), 7, 2.5, '99999999.99'])
    def test_accepts(self, value):
        assert is_decimal(value)

    @pytest.mark.parametrize('value', [
        '', '-1', '1.234', '1.', '.5', 'abc', '1,5', None, True, '123456789', '12345678901',
    ])
    def test_rejects(self, value):
        assert not is_decimal(value)


class TestFitsTotal:

    def test_largest_storable_total(self):
        assert fits_total(Decimal('999999999999.999999'))

    def test_too_many_integer_digits(self):
        assert not fits_total(Decimal('99999999.99') * Decimal('99999999.99'))


class TestLineItemTotal:

    def test_per_area(self):
        line_item = {'length': '2', 'width': '3'}
        assert line_item_total(line_item, PER_AREA_SERVICE) == Decimal('300')

    def test_per_unit(self):
        assert line_item_total({'quantity': '4'}, PER_UNIT_SERVICE) == Decimal('10.00')

    def test_uses_snapshot_when_no_service(self):
        line_item = {
            'unit_price': Decimal('50.00'),
            'pricing_mode': 'perArea',
            'length': Decimal('2.00'),
            'width': Decimal('3.00'),
        }
        assert line_item_total(line_item) == Decimal('300')

    def test_fractional_measurements_keep_precision(self):
        line_item = {'length': '1.25', 'width': '0.75'}
        service = {'price': Decimal('1.99'), 'pricing_mode': 'perArea'}
        assert line_item_total(line_item, service) == Decimal('1.865625')

    @pytest.mark.parametrize('line_item, field', [
        ({'length': '2.555', 'width': '3'}, 'length'),
        ({'length': '2', 'width': '-3'}, 'width'),
        ({'length': '2'}, 'width'),
    ])
    def test_invalid_area_measurement(self, line_item, field):
        with pytest.raises(InvalidQuantityError) as exc_info:
            line_item_total(line_item, PER_AREA_SERVICE)
        assert exc_info.value.field == field

    def test_missing_quantity(self):
        with pytest.raises(InvalidQuantityError):
            line_item_total({'length': '2', 'width': '3'}, PER_UNIT_SERVICE)

    def test_unknown_pricing_mode(self):
        with pytest.raises(InvalidQuantityError):
            line_item_total({'quantity': '1'}, {'price': '1', 'pricing_mode': 'perKilo'})


class TestOrderTotal:

    def test_sums_line_items(self):
        order = {'line_items': [
            {'unit_price': '50', 'pricing_mode': 'perArea', 'length': '2', 'width': '3'},
            {'unit_price': '2.50', 'pricing_mode': 'perUnit', 'quantity': '4'},
        ]}
        assert order_total(order) == Decimal('310')

    def test_empty_order_is_zero(self):
        assert order_total({'line_items': []}) == Decimal('0')

    def test_invalid_line_item_is_not_zero(self):
        order = {'line_items': [
            {'unit_price': '2.50', 'pricing_mode': 'perUnit', 'quantity': '1'},
            {'unit_price': '2.50', 'pricing_mode': 'perUnit', 'quantity': 'two'},
        ]}
        with pytest.raises(InvalidQuantityError) as exc_info:
            order_total(order)
        assert exc_info.value.index == 1
        assert 'Line item 1' in str(exc_info.value)


@pytest.mark.parametrize('value, expected', [
    (Decimal('310.999'), '310'),
    (Decimal('0.99'), '0'),
    ('12', '12'),
    (Decimal('1865.625'), '1865'),
])
def test_format_amount_truncates(value, expected):
    assert format_amount(value) == expected
