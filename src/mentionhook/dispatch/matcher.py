"""@-mention detection."""

from __future__ import annotations

import re
from collections.abc import Iterable

from mentionhook.dispatch.models import BotMention

# A mention must be followed by whitespace, end of text, or a character that
# cannot continue a name or an email domain.
_BOUNDARY = r"(?=\s|$|[^a-zA-Z0-9._-])"


class MentionMatcher:
    """Finds the first ``@<bot>`` mention of one of the configured bot names."""

    def __init__(self, bot_names: Iterable[str]) -> None:
        names = [name.strip().lstrip("@") for name in bot_names if name and name.strip().lstrip("@")]
        self.bot_names: list[str] = list(dict.fromkeys(names))
        self._canonical = {name.lower(): name for name in self.bot_names}
        self._pattern: re.Pattern[str] | None = None
        if self.bot_names:
            alternatives = "|".join(re.escape(name) for name in self.bot_names)
            self._pattern = re.compile(rf"@({alternatives}){_BOUNDARY}", re.IGNORECASE)

    def match(self, text: str | None) -> BotMention | None:
        if not text or "@" not in text or self._pattern is None:
            return None

        found = self._pattern.search(text)
        if not found:
            return None

        raw = found.group(1)
        return BotMention(raw_match=raw, bot_id=self._canonical.get(raw.lower(), raw))
