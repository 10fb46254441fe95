from __future__ import annotations

from .errors import DescriptionEmpty, DescriptionTooLong, TitleEmpty, TitleTooLong

MAX_TITLE_BYTES = 100
MAX_DESCRIPTION_BYTES = 1000


def _byte_length(value: str) -> int:
    return len(value.encode("utf-8"))


# PUBLIC_INTERFACE
def validate_title(title: str) -> None:
    """
    Check a candidate title.

    Raises:
        TitleTooLong: raw UTF-8 length exceeds 100 bytes.
        TitleEmpty: nothing is left after trimming whitespace.
    """
    if _byte_length(title) > MAX_TITLE_BYTES:
        raise TitleTooLong()
    if not title.strip():
        raise TitleEmpty()


# PUBLIC_INTERFACE
def validate_description(description: str) -> None:
    """
    Check a candidate description.

    Raises:
        DescriptionTooLong: raw UTF-8 length exceeds 1000 bytes.
        DescriptionEmpty: nothing is left after trimming whitespace.
    """
    if _byte_length(description) > MAX_DESCRIPTION_BYTES:
        raise DescriptionTooLong()
    if not description.strip():
        raise DescriptionEmpty()
