import json
import logging
from pathlib import Path
from typing import Optional

from models import Character

logger = logging.getLogger(__name__)


def load_character_from_json(file_path: str) -> Optional[Character]:
    """Load the bot character from a JSON file"""
    try:
        with open(file_path, 'r') as f:
            data = json.load(f)

        if 'system_prompt' not in data:
            logger.error(f"No 'system_prompt' field found in {file_path}")
            return None

        return Character(
            name=data.get('name', 'Agent'),
            system_prompt=data['system_prompt'],
            bio=list(data.get('bio', [])),
            style=list(data.get('style', []))
        )
    except Exception as e:
        logger.error(f"Error loading character from {file_path}: {str(e)}")
        return None


default_character = Character(
    name="Ragent",
    system_prompt=(
        "You are Ragent, a friendly social agent replying to posts. "
        "Keep replies short, warm and on topic."
    )
)


def get_character(file_path: Optional[str]) -> Character:
    """Load the configured character, falling back to the default one"""
    if file_path and Path(file_path).exists():
        character = load_character_from_json(file_path)
        if character:
            logger.info(f"Loaded character '{character.name}' from {file_path}")
            return character
    logger.warning(f"Character file {file_path} unavailable, using default character")
    return default_character
