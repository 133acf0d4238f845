from __future__ import annotations

from companion.core.safety import clamp_reply_text, clean_message


def test_clean_message_strips_control_chars_and_whitespace():
    cleaned = clean_message("  hi\x00\tthere\n\n friend\x7f ")

    assert cleaned.text == "hi there friend"
    assert cleaned.truncated is False
    assert cleaned.is_empty is False


def test_clean_message_truncates():
    cleaned = clean_message("abcdef ghij", max_chars=7)

    assert cleaned.text == "abcdef"
    assert cleaned.truncated is True


def test_blank_or_missing_message_is_empty():
    assert clean_message(" \n\t ").is_empty
    assert clean_message(None).is_empty


def test_clamp_reply_text():
    assert clamp_reply_text("short", limit=10) == "short"
    assert clamp_reply_text("a" * 20, limit=10) == "a" * 7 + "..."
    assert clamp_reply_text("abcdef", limit=2) == "ab"
    assert clamp_reply_text("abcdef", limit=0) == ""
