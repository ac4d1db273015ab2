import pytest

from models import Author, Message
from core.exceptions import ValidationError
from core.message_validator import validate_message, MAX_TEXT_LENGTH


def test_sanitizes_text_in_place():
    message = Message(platform="farcaster", text="  <b>hi</b> \\o/  ", author=Author(id=1, username="a"))

    validate_message(message)

    assert message.text == "bhi/b o/"


def test_truncates_long_text():
    message = Message(platform="telegram", text="x" * 5000, author=Author(id=1, username="a"))

    validate_message(message)

    assert len(message.text) == MAX_TEXT_LENGTH


@pytest.mark.parametrize("text", ["hello", " padded ", "<<<>>>ok", "y" * 2001, "multi\nline"])
def test_valid_messages_never_raise(text):
    message = Message(platform="twitter", text=text, author=Author(id=7, username="user"))

    validate_message(message)

    assert len(message.text) <= MAX_TEXT_LENGTH


@pytest.mark.parametrize("message", [
    Message(platform=None, text="hello", author=Author(id=1, username="a")),
    Message(platform="", text="hello", author=Author(id=1, username="a")),
    Message(platform="farcaster", text=None, author=Author(id=1, username="a")),
    Message(platform="farcaster", text="", author=Author(id=1, username="a")),
    Message(platform="farcaster", text=42, author=Author(id=1, username="a")),
    Message(platform="farcaster", text="hello", author=None),
    Message(platform="farcaster", text="hello", author=Author(id=1, username=None)),
])
def test_invalid_messages_raise(message):
    with pytest.raises(ValidationError):
        validate_message(message)
