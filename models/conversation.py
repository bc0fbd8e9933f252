"""Conversation history passed between narration cycles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Union

MessageContent = Union[str, List[Dict[str, Any]]]


@dataclass
class ConversationMessage:
    """Single role-tagged message; content is plain text or a list of content parts."""

    role: str
    content: MessageContent

    def to_payload(self) -> Dict[str, Any]:
        """Return the chat-completions representation of this message."""
        return {"role": self.role, "content": self.content}


class ConversationHistory:
    """Append-only conversation context with exactly one leading system message.

    The history is owned by the interaction loop and handed to the commentary
    client on every cycle. Messages are only ever appended; the one exception is
    `discard_pending_user_turn`, which removes a user turn whose completion call
    failed so that every user turn stays paired with an assistant reply.
    """

    def __init__(self, system_prompt: str) -> None:
        if not system_prompt or not system_prompt.strip():
            raise ValueError("A system prompt is required to start a conversation.")
        self._messages: List[ConversationMessage] = [
            ConversationMessage(role="system", content=system_prompt.strip())
        ]

    @property
    def messages(self) -> List[ConversationMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def has_pending_user_turn(self) -> bool:
        """True when the last message is a user turn still awaiting a reply."""
        return self._messages[-1].role == "user"

    def append_user(self, content: MessageContent) -> ConversationMessage:
        """Append a user turn; a previous user turn must have been answered first."""
        if self.has_pending_user_turn:
            raise RuntimeError("Previous user turn has no assistant reply yet.")
        message = ConversationMessage(role="user", content=content)
        self._messages.append(message)
        return message

    def append_assistant(self, text: str) -> ConversationMessage:
        """Append the assistant reply to the pending user turn."""
        if not self.has_pending_user_turn:
            raise RuntimeError("No user turn is waiting for an assistant reply.")
        message = ConversationMessage(role="assistant", content=text)
        self._messages.append(message)
        return message

    def discard_pending_user_turn(self) -> bool:
        """Drop an unanswered trailing user turn. Returns True if one was removed."""
        if not self.has_pending_user_turn:
            return False
        self._messages.pop()
        return True

    def to_payload(self) -> List[Dict[str, Any]]:
        """Return the full history in chat-completions message format."""
        return [msg.to_payload() for msg in self._messages]

    def transcript(self, limit: int = 15) -> str:
        """Return recent text messages as a transcript, skipping image payloads."""
        slice_ = self._messages[-limit:] if limit else self._messages
        lines = []
        for msg in slice_:
            if isinstance(msg.content, str):
                lines.append(f"{msg.role.upper()}: {msg.content}")
            else:
                texts = [part.get("text", "") for part in msg.content if part.get("type") == "text"]
                lines.append(f"{msg.role.upper()}: {' '.join(texts)} [image]")
        return "\n".join(lines)
