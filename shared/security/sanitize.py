import re

_UNSAFE_CHARS = re.compile(r"[<>'\"]")
MAX_INPUT_LENGTH = 1000


def sanitize_string(value) -> str:
    """Strips markup characters and trims user supplied text. Non-strings become ''."""
    if not isinstance(value, str):
        return ""
    return _UNSAFE_CHARS.sub("", value).strip()[:MAX_INPUT_LENGTH]
