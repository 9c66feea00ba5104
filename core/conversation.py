# core/conversation.py

from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict
from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    HumanMessage,
    messages_from_dict,
    messages_to_dict,
)


def text_part(text: str) -> dict:
    return {"type": "text", "text": text}


def media_part(mime_type: str, data: str) -> dict:
    """Inline binary part. `data` is base64 text."""
    return {"type": "media", "mime_type": mime_type, "data": data}


def user_turn(text: str, attachment=None) -> HumanMessage:
    """Builds a user turn. With an attachment the content becomes a list of parts (text first)."""
    if attachment is None:
        return HumanMessage(content=text)
    return HumanMessage(content=[text_part(text), media_part(attachment.mime_type, attachment.data)])


def model_turn(text: str) -> AIMessage:
    return AIMessage(content=text)


def turn_role(turn: BaseMessage) -> str:
    """Maps a langchain message to the remote model's role names."""
    return "model" if turn.type == "ai" else "user"


def turn_text(turn: BaseMessage) -> str:
    """Joins the text parts of a turn, ignoring binary parts."""
    if isinstance(turn.content, str):
        return turn.content
    texts = []
    for part in turn.content:
        if isinstance(part, str):
            texts.append(part)
        elif isinstance(part, dict) and "text" in part:
            texts.append(part["text"])
    return "\n".join(texts)


class ConversationSession(BaseModel):
    """
    Ordered, append-only log of chat turns held for the lifetime of a chat screen.
    Appending never mutates the session; it returns a new one with the turn last.
    """
    model_config = ConfigDict(frozen=True)

    turns: Tuple[BaseMessage, ...] = ()

    def append(self, turn: BaseMessage) -> "ConversationSession":
        return ConversationSession(turns=self.turns + (turn,))

    def extend(self, turns: List[BaseMessage]) -> "ConversationSession":
        return ConversationSession(turns=self.turns + tuple(turns))

    def as_messages(self) -> List[BaseMessage]:
        return list(self.turns)

    def last(self) -> Optional[BaseMessage]:
        return self.turns[-1] if self.turns else None

    def __len__(self) -> int:
        return len(self.turns)

    def to_dict(self) -> List[dict]:
        """Serialises the turns for callers that want to keep the chat."""
        return messages_to_dict(list(self.turns))

    @classmethod
    def from_dict(cls, data: List[dict]) -> "ConversationSession":
        return cls(turns=tuple(messages_from_dict(data)))
