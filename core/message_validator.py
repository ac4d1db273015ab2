import re
import logging
from models import Message
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 2000
DENYLIST_PATTERN = re.compile(r"[\\<>]")


def validate_message(message: Message) -> None:
    """Validate an inbound message and sanitize its text in place

    Raises:
        ValidationError: when platform, text or author username is missing
    """
    if not message.platform:
        raise ValidationError("Message must have a platform")

    if not message.text or not isinstance(message.text, str):
        raise ValidationError("Message must have valid text content")

    if not message.author or not message.author.username:
        raise ValidationError("Message must have an author with a username")

    message.text = DENYLIST_PATTERN.sub("", message.text.strip())[:MAX_TEXT_LENGTH]
