"""Unit tests for Pydantic schema validation."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from app.models.user import UserRole
from app.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserCreateRequest
from app.schemas.payment import PaymentCreate, PaymentResponse
from tests.conftest import _make_payment_model, make_payment_payload, make_register_payload

# ======================================================================
# PaymentCreate
# ======================================================================


class TestPaymentCreate:
    """Tests for payment submission validation."""

    def test_valid_payment(self):
        p = PaymentCreate(**make_payment_payload())
        assert p.amount == Decimal("100.00")
        assert p.currency == "ZAR"
        assert p.swift_code == "ABSAZAJJ"
        assert p.account_number == "1234567890"

    def test_eleven_character_swift_code(self):
        p = PaymentCreate(**make_payment_payload(swift_code="ABSAZAJJXXX"))
        assert p.swift_code == "ABSAZAJJXXX"

    def test_defaults_currency_to_zar(self):
        payload = make_payment_payload()
        del payload["currency"]
        assert PaymentCreate(**payload).currency == "ZAR"

    def test_accepts_client_field_aliases(self):
        p = PaymentCreate(
            Amount="250.50",
            Currency="USD",
            SWIFTCode="CHASUS33",
            AccountNumber="987654321",
            Reference="Rent",
        )
        assert p.amount == Decimal("250.50")
        assert p.swift_code == "CHASUS33"
        assert p.account_number == "987654321"

    @pytest.mark.parametrize("swift", ["BAD", "absazajj", "ABSAZAJ", "ABSAZAJJXX", "1BSAZAJJ"])
    def test_rejects_malformed_swift_code(self, swift):
        with pytest.raises(ValidationError):
            PaymentCreate(**make_payment_payload(swift_code=swift))

    @pytest.mark.parametrize("amount", ["0", "-50.00", "10.001", "abc"])
    def test_rejects_bad_amount(self, amount):
        with pytest.raises(ValidationError):
            PaymentCreate(**make_payment_payload(amount=amount))

    @pytest.mark.parametrize("account", ["1234", "12345678901234567890123", "12345abc"])
    def test_rejects_bad_account_number(self, account):
        with pytest.raises(ValidationError):
            PaymentCreate(**make_payment_payload(account_number=account))

    def test_rejects_unknown_currency(self):
        with pytest.raises(ValidationError, match="supported currency"):
            PaymentCreate(**make_payment_payload(currency="XYZ"))

    def test_blank_reference_becomes_none(self):
        assert PaymentCreate(**make_payment_payload(reference="   ")).reference is None

    def test_rejects_markup_in_reference(self):
        with pytest.raises(ValidationError):
            PaymentCreate(**make_payment_payload(reference="<script>alert(1)</script>"))


class TestPaymentResponse:
    def test_from_orm_object(self):
        model = _make_payment_model(status="Verified", verified_by="admin-1")
        resp = PaymentResponse.model_validate(model)
        assert resp.status == "Verified"
        assert resp.verified_by == "admin-1"


# ======================================================================
# Auth schemas
# ======================================================================


class TestLoginRequest:
    def test_password_field(self):
        assert LoginRequest(email="a@b.co", password="x").password == "x"

    def test_credential_alias(self):
        assert LoginRequest(email="a@b.co", credential="x").password == "x"

    def test_missing_password_rejected(self):
        with pytest.raises(ValidationError):
            LoginRequest(email="a@b.co")


class TestRegisterRequest:
    def test_valid_registration(self):
        r = RegisterRequest(**make_register_payload())
        assert r.id_number == "9001015009087"

    def test_email_is_kept_as_submitted(self):
        r = RegisterRequest(**make_register_payload(email="Thandi@Example.COM"))
        assert r.email == "Thandi@Example.COM"

    def test_reserved_email_domain_rejected(self):
        with pytest.raises(ValidationError):
            RegisterRequest(**make_register_payload(email="thandi@bank.test"))

    def test_camel_case_aliases(self):
        payload = make_register_payload()
        payload["idNumber"] = payload.pop("id_number")
        payload["accountNumber"] = payload.pop("account_number")
        r = RegisterRequest(**payload)
        assert r.account_number == "1234567890"

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("username", "ab"),
            ("username", "bad name!"),
            ("email", "not-an-email"),
            ("password", "short"),
            ("password", "has spaces in it"),
            ("id_number", "12AB"),
            ("name", "R2-D2"),
        ],
    )
    def test_rejects_invalid_field(self, field, value):
        with pytest.raises(ValidationError):
            RegisterRequest(**make_register_payload(**{field: value}))

    def test_self_registration_has_no_role_field(self):
        r = RegisterRequest(**make_register_payload(role="Admin"))
        assert not hasattr(r, "role")

    def test_admin_create_request_defaults_to_user_role(self):
        assert UserCreateRequest(**make_register_payload()).role is UserRole.USER


class TestTokenResponse:
    def test_defaults(self):
        t = TokenResponse(token="abc", role="Admin", expires_in=1800)
        assert t.token_type == "bearer"
        assert t.role is UserRole.ADMIN
