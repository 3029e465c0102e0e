"""
Exception Unit Tests
"""

from simplehttp.exceptions import (
    ConfigError,
    ErrorCategory,
    InternalError,
    InvalidArgumentsError,
    ProfileError,
    SimpleHttpError,
    ValidationError,
)


class TestCategories:
    """Tests for error categorization"""

    def test_validation(self):
        error = ValidationError("bad", field="url")
        assert error.is_category(ErrorCategory.VALIDATION)
        assert error.field == "url"

    def test_profile(self):
        assert ProfileError("no").is_category(ErrorCategory.PROFILE)

    def test_internal(self):
        assert InternalError("odd").is_category(ErrorCategory.INTERNAL)

    def test_config(self):
        assert ConfigError("missing", code="CONFIG_FILE_NOT_FOUND").is_category(ErrorCategory.CONFIG)

    def test_unknown(self):
        assert SimpleHttpError("?").category == ErrorCategory.UNKNOWN


class TestInvalidArgumentsError:
    """Tests for InvalidArgumentsError"""

    def test_names_keys(self):
        """Should list the offending keys"""
        error = InvalidArgumentsError(["foo", "bar"])
        assert error.keys == ["foo", "bar"]
        assert "'foo'" in str(error)
        assert "'bar'" in str(error)
        assert error.details == {"keys": ["foo", "bar"]}
        assert isinstance(error, ValidationError)

    def test_to_dict(self):
        data = InvalidArgumentsError(["foo"]).to_dict()
        assert data["name"] == "InvalidArgumentsError"
        assert data["code"] == "VALIDATION_ERROR"
        assert data["category"] == "VAL"

    def test_description(self):
        description = InvalidArgumentsError(["foo"]).get_description()
        assert description.startswith("[VALIDATION_ERROR]")
