"""Outbound mail protocol for the support context."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class OutboundEmail:
    to: str
    subject: str
    text: str
    reply_to: Optional[str] = None
    bcc: Optional[str] = None


class Mailer(ABC):
    @abstractmethod
    async def send(self, email: OutboundEmail) -> str:
        """Send ``email`` and return its Message-ID; raise on transport failure."""
        pass
