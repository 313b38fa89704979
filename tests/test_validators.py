"""Tests for phone number and email validators."""

import pytest
from pydantic import BaseModel, ValidationError

from schoolfees.schemas.validators import Email, PhoneNumber, TermNumber


class PhoneModel(BaseModel):
    """Test model with phone number."""
    phone: PhoneNumber


class EmailModel(BaseModel):
    """Test model with email."""
    email: Email


class TermModel(BaseModel):
    """Test model with term number."""
    term_number: TermNumber


class TestPhoneValidator:
    """Tests for phone number validation."""

    def test_valid_phone_compact(self):
        """Test valid phone without spaces."""
        model = PhoneModel(phone="+260971234567")
        assert model.phone == "+260971234567"

    def test_valid_phone_with_spaces(self):
        """Test valid phone with spaces."""
        model = PhoneModel(phone="+260 97 1234567")
        assert model.phone == "+260971234567"

    def test_valid_phone_with_dashes(self):
        """Test valid phone with dashes."""
        model = PhoneModel(phone="+260-97-123-45-67")
        assert model.phone == "+260971234567"

    def test_valid_phone_mixed_format(self):
        """Test valid phone with mixed separators."""
        model = PhoneModel(phone="+260 97 123 45 67")
        assert model.phone == "+260971234567"

    def test_invalid_phone_no_country_code(self):
        """Test phone without country code."""
        with pytest.raises(ValidationError) as exc_info:
            PhoneModel(phone="0971234567")
        assert "Invalid phone number" in str(exc_info.value)

    def test_invalid_phone_wrong_country_code(self):
        """Test phone with wrong country code."""
        with pytest.raises(ValidationError) as exc_info:
            PhoneModel(phone="+998901234567")
        assert "Invalid phone number" in str(exc_info.value)

    def test_invalid_phone_too_short(self):
        """Test phone number too short."""
        with pytest.raises(ValidationError) as exc_info:
            PhoneModel(phone="+26097123456")  # Missing one digit
        assert "Invalid phone number" in str(exc_info.value)

    def test_invalid_phone_too_long(self):
        """Test phone number too long."""
        with pytest.raises(ValidationError) as exc_info:
            PhoneModel(phone="+2609712345678")  # One extra digit
        assert "Invalid phone number" in str(exc_info.value)

    def test_invalid_phone_letters(self):
        """Test phone with letters."""
        with pytest.raises(ValidationError) as exc_info:
            PhoneModel(phone="+260971234abc")
        assert "Invalid phone number" in str(exc_info.value)

    def test_invalid_operator_prefix(self):
        """Test landline prefixes are rejected."""
        with pytest.raises(ValidationError):
            PhoneModel(phone="+260211234567")

    def test_various_operators(self):
        """Test various Zambian operator codes."""
        valid_phones = [
            "+260971234567",  # Airtel
            "+260771234567",  # Airtel
            "+260961234567",  # MTN
            "+260761234567",  # MTN
            "+260951234567",  # Zamtel
        ]

        for phone in valid_phones:
            model = PhoneModel(phone=phone)
            assert model.phone == phone


class TestEmailValidator:
    """Tests for email validation."""

    def test_normalized(self):
        """Test emails are trimmed and lower-cased."""
        assert EmailModel(email="  Dana.Director@School.ZM ").email == "dana.director@school.zm"

    @pytest.mark.parametrize(
        "email",
        [
            "not-an-email",
            "a@b",
            "two words@school.zm",
            "@school.zm",
            "a@b..com",
            "a@.school.zm",
            "a..b@school.zm",
            "<x>@y.zm",
        ],
    )
    def test_invalid(self, email):
        """Test malformed addresses."""
        with pytest.raises(ValidationError):
            EmailModel(email=email)

    def test_plus_address(self):
        """Test sub-addressed mailboxes are accepted."""
        assert EmailModel(email="Bursar+Fees@school.zm").email == "bursar+fees@school.zm"


class TestTermNumber:
    """Tests for term numbers."""

    @pytest.mark.parametrize("term_number", [1, 2, 3])
    def test_valid(self, term_number):
        assert TermModel(term_number=term_number).term_number == term_number

    @pytest.mark.parametrize("term_number", [0, 4])
    def test_invalid(self, term_number):
        with pytest.raises(ValidationError):
            TermModel(term_number=term_number)
