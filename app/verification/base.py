"""
app/verification/base.py

Abstract interface for the bot-challenge verification layer.

The submission workflow only ever asks one question, "is this token
good?", and treats every failure the same way as a negative verdict,
so implementations must return False instead of raising.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class BotVerifier(ABC):
    """Contract every bot-verification backend must fulfil."""

    @abstractmethod
    async def verify(self, token: Optional[str]) -> bool:
        """
        Check a challenge-response token.

        Args:
            token: Token produced by the challenge widget. May be None or
                   empty, in which case the verdict is False.

        Returns:
            True only when the provider positively confirmed the token.
            Network errors, malformed replies and missing tokens all
            yield False; this method never raises.
        """
