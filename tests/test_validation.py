"""Tests for checkout input validation."""

from datetime import date

import pytest

from storefront.errors import ValidationError
from storefront.models.checkout import PaymentForm, PaymentMethod
from storefront.services.validation import (
    is_valid_expiry,
    is_valid_phone,
    parse_expiry,
    validate_customer_info,
    validate_payment,
)
from tests.conftest import TODAY, make_address, make_card_form, make_customer_form


def _field_error(func, *args) -> ValidationError:
    with pytest.raises(ValidationError) as exc_info:
        func(*args)
    return exc_info.value


class TestCustomerInfo:
    def test_valid_form(self):
        info = validate_customer_info(make_customer_form(email=" asha@example.com "))

        assert info.email == "asha@example.com"
        assert info.shipping == info.billing
        assert info.separate_shipping is False

    def test_empty_phone(self):
        error = _field_error(validate_customer_info, make_customer_form(phone=""))

        assert error.field == "phone"
        assert error.message == "Please fill in phone"

    def test_first_failing_field_wins(self):
        form = make_customer_form(email="", phone="", billing=make_address(city=""))

        error = _field_error(validate_customer_info, form)

        assert error.field == "email"

    def test_missing_billing_field(self):
        error = _field_error(validate_customer_info, make_customer_form(billing=make_address(postal=" ")))

        assert error.field == "billing.postal"
        assert error.message == "Please fill in postal code"

    def test_required_fields_checked_before_formats(self):
        form = make_customer_form(email="not-an-email", billing=make_address(state=""))

        error = _field_error(validate_customer_info, form)

        assert error.field == "billing.state"

    def test_invalid_email(self):
        error = _field_error(validate_customer_info, make_customer_form(email="asha@example"))

        assert error.field == "email"

    @pytest.mark.parametrize("phone", ["12345", "5876543210", "98765432101"])
    def test_invalid_phone(self, phone):
        error = _field_error(validate_customer_info, make_customer_form(phone=phone))

        assert error.field == "phone"

    def test_phone_formatting_is_ignored(self):
        assert is_valid_phone("98765-43210")
        assert is_valid_phone("987 654 3210")

    def test_separate_shipping_requires_fields(self):
        form = make_customer_form(same_shipping=False, shipping=make_address(city=""))

        error = _field_error(validate_customer_info, form)

        assert error.field == "shipping.city"
        assert error.message == "Please fill in shipping city"

    def test_separate_shipping_missing_entirely(self):
        error = _field_error(validate_customer_info, make_customer_form(same_shipping=False))

        assert error.field == "shipping.first_name"

    def test_separate_shipping_address(self):
        form = make_customer_form(same_shipping=False, shipping=make_address(city="Mysuru", postal="570001"))

        info = validate_customer_info(form)

        assert info.separate_shipping is True
        assert info.shipping.city == "Mysuru"


class TestPayment:
    def test_valid_card_strips_separators(self):
        payment = validate_payment(make_card_form(card_number="4111-1111-1111-1234"), TODAY)

        assert payment.method == PaymentMethod.CARD
        assert payment.card_number == "4111111111111234"
        assert payment.last_four == "1234"

    def test_expired_card(self):
        error = _field_error(validate_payment, make_card_form(expiry="01/20"), date(2025, 3, 1))

        assert error.field == "expiry"

    def test_expiry_in_current_month_is_valid(self):
        assert is_valid_expiry("06/25", TODAY)
        assert not is_valid_expiry("05/25", TODAY)

    @pytest.mark.parametrize("expiry", ["13/26", "1226", "ab/cd", ""])
    def test_malformed_expiry(self, expiry):
        assert parse_expiry(expiry) is None

    def test_four_digit_year(self):
        assert parse_expiry("07/2030") == (7, 2030)

    @pytest.mark.parametrize("card_number", ["4111", "4111 1111 1111 1111 1111", "4111 1111 abcd 1234"])
    def test_invalid_card_number(self, card_number):
        error = _field_error(validate_payment, make_card_form(card_number=card_number), TODAY)

        assert error.field == "card_number"

    def test_invalid_cvv(self):
        error = _field_error(validate_payment, make_card_form(cvv="12"), TODAY)

        assert error.field == "cvv"

    def test_missing_card_name(self):
        error = _field_error(validate_payment, make_card_form(card_name=""), TODAY)

        assert error.field == "card_name"

    def test_no_method(self):
        error = _field_error(validate_payment, PaymentForm(), TODAY)

        assert error.field == "method"

    def test_upi(self):
        payment = validate_payment(PaymentForm(method="upi", upi_id="asha@okhdfc"), TODAY)

        assert payment.upi_id == "asha@okhdfc"

    @pytest.mark.parametrize("upi_id", ["asha", "asha@ok", "asha@12345"])
    def test_invalid_upi(self, upi_id):
        error = _field_error(validate_payment, PaymentForm(method="upi", upi_id=upi_id), TODAY)

        assert error.field == "upi_id"

    def test_netbanking_requires_bank(self):
        error = _field_error(validate_payment, PaymentForm(method="netbanking"), TODAY)

        assert error.field == "bank"

    def test_cash_on_delivery_needs_no_details(self):
        payment = validate_payment(PaymentForm(method="cod"), TODAY)

        assert payment.method == PaymentMethod.COD

    def test_cvv_is_not_serialized(self):
        payment = validate_payment(make_card_form(), TODAY)

        assert "cvv" not in payment.model_dump()
