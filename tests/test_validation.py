"""Tests for input validation, timestamp normalization and settings."""

import pytest

from finance_server.config import AppSettings, get_settings
from finance_server.errors import DateParseError, ValidationError
from finance_server.validation import (
    InputValidator,
    normalize_timestamp,
    parse_timestamp,
    utc_now,
)
from finance_server.validation.schemas import (
    EntryCreate,
    EntryUpdate,
    UserCreate,
    UserUpdate,
)


class TestTimestamps:
    """Tests for ISO-8601 parsing and the canonical form."""
    
    def test_canonical_form(self):
        assert normalize_timestamp("2024-05-01T10:00:00Z") == "2024-05-01T10:00:00.000Z"
    
    def test_date_only_is_midnight_utc(self):
        assert normalize_timestamp("2024-05-01") == "2024-05-01T00:00:00.000Z"
    
    def test_naive_time_read_as_utc(self):
        assert normalize_timestamp("2024-05-01T10:00:00") == "2024-05-01T10:00:00.000Z"
    
    def test_same_instant_normalizes_equal(self):
        """Test that two spellings of one instant compare equal."""
        a = normalize_timestamp("2024-05-01T12:30:00+02:00")
        b = normalize_timestamp("2024-05-01T10:30:00.000Z")
        assert a == b == "2024-05-01T10:30:00.000Z"
    
    def test_milliseconds_kept(self):
        assert normalize_timestamp("2024-05-01T10:00:00.123456Z") == "2024-05-01T10:00:00.123Z"
    
    def test_years_below_1000_zero_padded(self):
        """Test that early years keep four digits and parse back."""
        stored = normalize_timestamp("0999-01-01T00:00:00Z")
        assert stored == "0999-01-01T00:00:00.000Z"
        assert normalize_timestamp(stored) == stored
    
    def test_out_of_range_offset_rejected(self):
        with pytest.raises(DateParseError):
            parse_timestamp("0001-01-01T00:00:00+05:00")
    
    def test_bad_date_rejected(self):
        with pytest.raises(DateParseError, match="Bad ISO date: yesterday"):
            parse_timestamp("yesterday")
    
    def test_empty_date_rejected(self):
        with pytest.raises(DateParseError):
            parse_timestamp("")
    
    def test_impossible_date_rejected(self):
        with pytest.raises(DateParseError):
            parse_timestamp("2024-02-30")
    
    def test_utc_now_is_canonical(self):
        now = utc_now()
        assert now.endswith("Z")
        assert normalize_timestamp(now) == now


class TestInputValidator:
    """Tests for payload validation against operation inputs."""
    
    def setup_method(self):
        self.validator = InputValidator()
    
    def test_valid_payload(self):
        payload = self.validator.validate(UserCreate, {"name": "Ann"})
        assert payload.name == "Ann"
        assert payload.email is None
    
    def test_camel_case_keys(self):
        payload = self.validator.validate(
            EntryCreate,
            {"userId": "usr_1", "kind": "expense", "amount": 12.5},
        )
        assert payload.user_id == "usr_1"
        assert payload.category_id is None
        assert payload.amount == 12.5
    
    def test_missing_required_field(self):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate(UserCreate, {}, "user.add")
        error = exc_info.value
        assert error.kind == "ValidationError"
        assert error.issues[0].field == "name"
        assert error.issues[0].issue_type == "missing"
        assert "user.add" in error.message
    
    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            self.validator.validate(UserCreate, {"name": ""})
    
    def test_email_kept_as_entered(self):
        payload = self.validator.validate(UserCreate, {"name": "Ann", "email": "Ann@Example.COM"})
        assert payload.email == "Ann@Example.COM"
    
    def test_bad_email_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate(UserUpdate, {"id": "usr_1", "email": "not-an-email"})
        assert exc_info.value.issues[0].field == "email"
    
    @pytest.mark.parametrize("amount", [0, -1, "10", float("inf")])
    def test_bad_amount_rejected(self, amount):
        with pytest.raises(ValidationError):
            self.validator.validate(
                EntryCreate,
                {"userId": "usr_1", "kind": "income", "amount": amount},
            )
    
    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate(
                EntryCreate,
                {"userId": "usr_1", "kind": "transfer", "amount": 1},
            )
        assert exc_info.value.issues[0].field == "kind"
    
    def test_numeric_id_not_coerced(self):
        with pytest.raises(ValidationError):
            self.validator.validate(EntryUpdate, {"id": 42})
    
    def test_unknown_keys_ignored(self):
        payload = self.validator.validate(UserCreate, {"name": "Ann", "role": "admin"})
        assert not hasattr(payload, "role")
    
    def test_none_is_empty_object(self):
        with pytest.raises(ValidationError):
            self.validator.validate(UserCreate, None)
    
    def test_non_object_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate(UserCreate, ["Ann"])
        assert exc_info.value.issues[0].issue_type == "object_type"
    
    def test_error_dict_lists_issues(self):
        with pytest.raises(ValidationError) as exc_info:
            self.validator.validate(UserCreate, {})
        data = exc_info.value.to_dict()
        assert data["kind"] == "ValidationError"
        assert data["issues"][0]["field"] == "name"


class TestSettings:
    """Tests for environment-driven configuration."""
    
    def test_db_path_from_environment(self, monkeypatch, tmp_path):
        target = tmp_path / "custom.json"
        monkeypatch.setenv("DB_PATH", str(target))
        get_settings.cache_clear()
        try:
            assert get_settings().resolved_db_path == target.resolve()
        finally:
            get_settings.cache_clear()
    
    def test_default_db_path_in_working_directory(self, monkeypatch, tmp_path):
        monkeypatch.delenv("DB_PATH", raising=False)
        monkeypatch.chdir(tmp_path)
        settings = AppSettings()
        assert settings.resolved_db_path == (tmp_path / "mcp-finance-db.json").resolve()
    
    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert AppSettings().log_level == "DEBUG"
    
    def test_unknown_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValueError):
            AppSettings()
