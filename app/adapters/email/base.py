from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class OutboundEmail:
    """A fully rendered message ready for delivery."""

    sender: str
    to: str
    reply_to: str
    subject: str
    html: str


class AbstractEmailProvider(ABC):
    """Interface for transactional email providers."""

    name: str = "abstract"

    @abstractmethod
    async def send(self, email: OutboundEmail) -> str:
        """Deliver a message.

        Args:
            email: Rendered message.

        Returns:
            str: Provider-assigned message id.

        Raises:
            DeliveryAppError: If the provider rejects the message or errors out.
        """
        ...
