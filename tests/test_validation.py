import pytest

from src.task_api.errors import DescriptionEmpty, DescriptionTooLong, TitleEmpty, TitleTooLong
from src.task_api.validation import validate_description, validate_title


class TestValidateTitle:
    @pytest.mark.parametrize("title", ["a", "Buy milk", " padded ", "x" * 100])
    def test_accepts_valid(self, title):
        validate_title(title)

    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    def test_empty_after_trim(self, title):
        with pytest.raises(TitleEmpty):
            validate_title(title)

    def test_101_bytes_too_long(self):
        with pytest.raises(TitleTooLong):
            validate_title("x" * 101)

    def test_limit_counts_bytes_not_characters(self):
        # 34 three-byte characters = 102 bytes
        with pytest.raises(TitleTooLong):
            validate_title("€" * 34)
        validate_title("€" * 33)

    def test_whitespace_only_over_limit_reports_length(self):
        with pytest.raises(TitleTooLong):
            validate_title(" " * 101)


class TestValidateDescription:
    def test_accepts_limit(self):
        validate_description("d" * 1000)

    @pytest.mark.parametrize("description", ["", "  "])
    def test_empty_after_trim(self, description):
        with pytest.raises(DescriptionEmpty):
            validate_description(description)

    def test_1001_bytes_too_long(self):
        with pytest.raises(DescriptionTooLong):
            validate_description("d" * 1001)
