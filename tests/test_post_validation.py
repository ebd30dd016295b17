"""Tests for post field validation."""

from __future__ import annotations

import pytest

from core.persistence.errors import ValidationError
from core.persistence.validation import validate_new_post, validate_post_changes
from core.types import SUBTITLE_MAX_LENGTH, TITLE_MAX_LENGTH


def test_validate_new_post_accepts_valid_fields():
    fields = validate_new_post(title="Hello", subtitle="World", body="Body text")
    assert fields == {"title": "Hello", "subtitle": "World", "body": "Body text"}


def test_validate_new_post_accepts_empty_strings():
    """Empty strings are a valid state, distinct from a missing field."""
    fields = validate_new_post(title="", subtitle="", body="")
    assert fields == {"title": "", "subtitle": "", "body": ""}


@pytest.mark.parametrize("missing", ["title", "subtitle", "body"])
def test_validate_new_post_rejects_missing_field(missing):
    kwargs = {"title": "t", "subtitle": "s", "body": "b", missing: None}
    with pytest.raises(ValidationError) as exc_info:
        validate_new_post(**kwargs)
    assert exc_info.value.field == missing
    assert "required" in str(exc_info.value)


def test_validate_new_post_rejects_non_string():
    with pytest.raises(ValidationError, match="title must be a string"):
        validate_new_post(title=123, subtitle="s", body="b")


def test_title_length_limit_is_inclusive():
    validate_new_post(title="x" * TITLE_MAX_LENGTH, subtitle="s", body="b")
    with pytest.raises(ValidationError) as exc_info:
        validate_new_post(title="x" * (TITLE_MAX_LENGTH + 1), subtitle="s", body="b")
    assert exc_info.value.field == "title"


def test_subtitle_length_limit_is_inclusive():
    validate_new_post(title="t", subtitle="x" * SUBTITLE_MAX_LENGTH, body="b")
    with pytest.raises(ValidationError) as exc_info:
        validate_new_post(title="t", subtitle="x" * (SUBTITLE_MAX_LENGTH + 1), body="b")
    assert exc_info.value.field == "subtitle"


def test_body_is_unbounded():
    fields = validate_new_post(title="t", subtitle="s", body="x" * 100_000)
    assert len(fields["body"]) == 100_000


def test_length_counts_characters_not_bytes():
    # 127 multi-byte characters still fit VARCHAR(127).
    title = "é" * TITLE_MAX_LENGTH
    assert validate_new_post(title=title, subtitle="s", body="b")["title"] == title


def test_validate_post_changes_skips_unsupplied_fields():
    assert validate_post_changes(title="X") == {"title": "X"}
    assert validate_post_changes() == {}


def test_validate_post_changes_checks_lengths():
    with pytest.raises(ValidationError):
        validate_post_changes(subtitle="x" * (SUBTITLE_MAX_LENGTH + 1))


@pytest.mark.parametrize("bad", ["\ud800", "abc\udfff", "a\x00b"])
@pytest.mark.parametrize("field", ["title", "subtitle", "body"])
def test_validate_new_post_rejects_text_postgres_cannot_store(field, bad):
    kwargs = {"title": "t", "subtitle": "s", "body": "b", field: bad}
    with pytest.raises(ValidationError) as exc_info:
        validate_new_post(**kwargs)
    assert exc_info.value.field == field


def test_validate_post_changes_rejects_lone_surrogate():
    with pytest.raises(ValidationError, match="body must be valid UTF-8 text"):
        validate_post_changes(body="\udc80")


def test_validate_post_changes_rejects_nul():
    with pytest.raises(ValidationError, match="title must not contain NUL"):
        validate_post_changes(title="\x00")


def test_non_bmp_characters_are_accepted():
    assert validate_new_post(title="\U0001f600", subtitle="s", body="b")["title"] == "\U0001f600"
