"""Mention sanitizing for re-posted message text.

Pure Python, no framework dependencies.
"""

import re
from typing import Optional

ZWSP = "\u200b"

_BROADCAST_RE = re.compile(r"@(everyone|here)")
_USER_RE = re.compile(r"<@!?\d+>")
_ROLE_RE = re.compile(r"<@&\d+>")
_CHANNEL_RE = re.compile(r"<#\d+>")


def sanitize_mentions(text: Optional[str]) -> Optional[str]:
    """Defuse mentions so a re-post cannot ping anyone.

    ``@everyone``/``@here`` keep their visible text with a zero-width space
    after the ``@``. User, role and channel tokens are replaced by generic
    ``@user``, ``@role`` and ``#channel`` placeholders; the ids are dropped.
    Empty or missing text returns None.
    """
    if not text:
        return None
    text = _BROADCAST_RE.sub(f"@{ZWSP}\\1", text)
    text = _USER_RE.sub(f"@{ZWSP}user", text)
    text = _ROLE_RE.sub(f"@{ZWSP}role", text)
    text = _CHANNEL_RE.sub(f"#{ZWSP}channel", text)
    return text
