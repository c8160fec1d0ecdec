"""Outbound Feishu custom-bot message model."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class FeishuMessage(BaseModel):
    """Message posted to a Feishu custom-bot webhook.

    Attributes:
        msg_type: Always "interactive" for card messages.
        card: The card body (header and elements).
        timestamp: Epoch seconds as a string, present only when signed.
        sign: Base64 signature, present only when signed.
    """

    msg_type: str = Field(default="interactive")

    card: Dict[str, Any] = Field(default_factory=dict)

    timestamp: Optional[str] = Field(default=None)

    sign: Optional[str] = Field(default=None)

    @property
    def is_signed(self) -> bool:
        return self.sign is not None

    @property
    def title(self) -> str:
        """The card header title text, empty if the card has none."""
        return (
            self.card.get("header", {}).get("title", {}).get("content", "")
        )

    def to_payload(self) -> Dict[str, Any]:
        """Serialise for the request body, omitting unset signature fields."""
        return self.model_dump(exclude_none=True)
