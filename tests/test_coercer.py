"""
Unit tests for value coercion and number formatting.
"""

import pytest

from estab.coercer import coerce_value, format_number, is_ragged, is_real_value
from estab.config import RunConfig
from estab.errors import MalformedValueError
from estab.resolver import ABSENT


@pytest.fixture
def config():
    return RunConfig(fields=("x",))


class TestFormatNumber:
    """Tests for format_number function"""

    def test_integral_float(self):
        """Test that integral floats have no decimals"""
        assert format_number(7.0, 2) == "7"
        assert format_number(-3.0, 2) == "-3"

    def test_int(self):
        """Test that ints are written as is"""
        assert format_number(42, 2) == "42"

    def test_large_integral_float(self):
        """Test that large integral floats are not written in exponent form"""
        assert format_number(1e20, 2) == "100000000000000000000"

    def test_fraction_within_precision(self):
        """Test that 7.5 with precision 2 reads back as 7.5"""
        result = format_number(7.5, 2)
        assert result == "7.5"
        assert float(result) == 7.5

    def test_fraction_rounded_to_precision(self):
        """Test that precision counts significant digits"""
        assert format_number(3.14159, 2) == "3.1"
        assert format_number(3.14159, 4) == "3.142"

    def test_small_magnitude_uses_exponent(self):
        """Test that very small values switch to exponent notation"""
        assert format_number(0.000012345, 2) == "1.2E-05"

    def test_precision_zero(self):
        """Test that precision 0 keeps one significant digit"""
        assert format_number(2.5, 0) == "2"


class TestCoerceScalars:
    """Tests for coerce_value with scalar values"""

    def test_none(self, config):
        """Test that null becomes the placeholder"""
        assert coerce_value(None, config) == ["NA"]

    def test_absent(self, config):
        """Test that a missing value becomes the placeholder"""
        assert coerce_value(ABSENT, config) == ["NA"]

    def test_string(self, config):
        """Test that strings are kept as is"""
        assert coerce_value("hello", config) == ["hello"]

    def test_empty_string_kept(self, config):
        """Test that an empty string stays empty without zero-as-null"""
        assert coerce_value("", config) == [""]

    def test_empty_string_zero_as_null(self):
        """Test that an empty string becomes the placeholder with zero-as-null"""
        config = RunConfig(fields=("x",), zero_as_null=True, null_value="-")
        assert coerce_value("", config) == ["-"]

    def test_booleans(self, config):
        """Test that booleans are written in lower case"""
        assert coerce_value(True, config) == ["true"]
        assert coerce_value(False, config) == ["false"]

    def test_numbers(self, config):
        """Test that numbers use format_number"""
        assert coerce_value(7.0, config) == ["7"]
        assert coerce_value(0, config) == ["0"]
        assert coerce_value(2.25, config) == ["2.2"]

    def test_object_is_malformed(self, config):
        """Test that an object leaf raises MalformedValueError"""
        with pytest.raises(MalformedValueError, match="address") as exc_info:
            coerce_value({"city": "NYC"}, config, "address")
        assert exc_info.value.field == "address"

    def test_unknown_type_is_malformed(self, config):
        """Test that non-JSON types are not silently dropped"""
        with pytest.raises(MalformedValueError):
            coerce_value(object(), config, "x")


class TestCoerceLists:
    """Tests for coerce_value with lists"""

    def test_flat_list(self, config):
        """Test that a flat list gives one token per element"""
        assert coerce_value(["a", 1, 2.0, True], config) == ["a", "1", "2", "true"]

    def test_empty_list(self, config):
        """Test that an empty list gives no tokens"""
        assert coerce_value([], config) == []

    def test_null_elements(self, config):
        """Test that null elements become the placeholder"""
        assert coerce_value(["a", None], config) == ["a", "NA"]

    def test_ragged_list(self, config):
        """Test that inner lists are joined with the primary separator"""
        assert coerce_value(["a", ["b", "c"]], config) == ["a", "b|c"]

    def test_ragged_list_all_inner(self, config):
        """Test a list made only of lists"""
        assert coerce_value([[1, 2], [3]], config) == ["1|2", "3"]

    def test_objects_in_list_are_malformed(self, config):
        """Test that objects inside a list raise MalformedValueError"""
        with pytest.raises(MalformedValueError):
            coerce_value([{"id": 1}], config, "items")

    def test_three_levels_are_malformed(self, config):
        """Test that lists nested three levels deep raise MalformedValueError"""
        with pytest.raises(MalformedValueError):
            coerce_value(["a", ["b", ["c"]]], config, "x")


class TestValueClassification:
    """Tests for is_ragged and is_real_value"""

    def test_is_ragged(self):
        assert is_ragged(["a", ["b"]])
        assert not is_ragged(["a", "b"])
        assert not is_ragged([])
        assert not is_ragged("ab")

    def test_is_real_value(self):
        assert is_real_value("")
        assert is_real_value(0)
        assert is_real_value(False)
        assert is_real_value(["a"])
        assert not is_real_value(None)
        assert not is_real_value(ABSENT)
        assert not is_real_value([])
        assert not is_real_value([None, [None]])

    def test_empty_string_with_zero_as_null(self):
        """Test that empty strings written as null do not count as data"""
        assert not is_real_value("", zero_as_null=True)
        assert not is_real_value(["", None], zero_as_null=True)
        assert is_real_value(["", "a"], zero_as_null=True)
