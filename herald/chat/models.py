"""Pydantic models for chat transport values."""

from pydantic import BaseModel, Field


class User(BaseModel):
    """A chat participant as seen by an adapter."""

    id: str = ""
    name: str = ""
    email: str = ""
    is_bot: bool = False


class Channel(BaseModel):
    """A chat channel (room, conversation, DM thread)."""

    id: str = ""
    name: str = ""


class Message(BaseModel):
    """An inbound chat message handed to the dispatcher.

    ``is_direct`` marks a private/direct conversation with the bot, which
    makes every message in it addressed to the bot.
    """

    user: User = Field(default_factory=User)
    channel: Channel = Field(default_factory=Channel)
    text: str = ""
    is_direct: bool = False
    archive_link: str = ""
    timestamp: str = ""
