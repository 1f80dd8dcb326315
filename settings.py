import os

from dotenv import load_dotenv
from pydantic import BaseModel

TRUTHY = ("1", "true", "yes", "on")
FALSY = ("0", "false", "no", "off")


class Settings(BaseModel):
    preserve_formatting: bool = True
    require_json_extension: bool = True


def parse_flag(name, default):
    """Read a boolean environment variable.

    Raises:
        ValueError: if the variable is set to something that is not a boolean
    """
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default

    value = raw.strip().lower()
    if value in TRUTHY:
        return True
    if value in FALSY:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got: {raw}")


def get_settings() -> Settings:
    """Load settings from the environment, reading a .env file if present."""
    load_dotenv()
    return Settings(
        preserve_formatting=parse_flag("DEDUPE_PRESERVE_FORMATTING", True),
        require_json_extension=parse_flag("DEDUPE_REQUIRE_JSON_EXTENSION", True),
    )
