"""Helper utilities for building and reading A2A messages.

This module provides convenience functions that reduce boilerplate when
agents create response messages, error messages and artifacts.
"""

from typing import Optional

from agentrelay.agents.models import Artifact, Message, TextPart


def create_text_part(text: str) -> TextPart:
    """Create a text part for a message."""
    return TextPart(text=text)


def create_response_message(text: str) -> Message:
    """Create an agent message with a single text part.

    Args:
        text: Text content for the response

    Returns:
        Message with role "agent"

    Example:
        >>> message = create_response_message("Hello")
        >>> message.parts[0].text
        'Hello'
    """
    return Message(role="agent", parts=[create_text_part(text)])


def create_error_message(error_text: str) -> Message:
    """Create an agent message describing an error.

    Args:
        error_text: Description of the error

    Returns:
        Message whose text is prefixed with "Error: "
    """
    return create_response_message(f"Error: {error_text}")


def create_text_artifact(name: str, text: str, description: Optional[str] = None) -> Artifact:
    """Create an artifact holding a single text part.

    Args:
        name: Artifact name
        text: Text content
        description: Optional artifact description

    Returns:
        Artifact object
    """
    return Artifact(name=name, description=description, parts=[create_text_part(text)])


def extract_text(message: Optional[Message]) -> str:
    """Extract the text content of a message.

    Text parts are joined with a single space; file and data parts are
    ignored.

    Args:
        message: Message to read (None yields an empty string)

    Returns:
        Combined text content, stripped, or empty string if none

    Example:
        >>> msg = Message(role="user", parts=[TextPart(text="a"), TextPart(text="b")])
        >>> extract_text(msg)
        'a b'
    """
    if message is None:
        return ""

    text_parts = [part.text for part in message.parts if isinstance(part, TextPart)]
    return " ".join(text_parts).strip()
