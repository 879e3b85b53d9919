"""Pydantic models for the A2A (Agent-to-Agent) protocol.

This module defines the data models for agent discovery (agent cards,
capabilities, skills) and for the content exchanged between agents
(message parts, messages, artifacts). Field names follow the camelCase
wire format of the protocol through aliases.
"""

from typing import Annotated, Any, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FileContent(BaseModel):
    """File payload carried by a FilePart.

    Attributes:
        name: Optional original filename
        mime_type: Optional MIME type of the file
        bytes: Optional base64-encoded content
        uri: Optional URI pointing to the content
    """

    name: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    bytes: Optional[str] = None
    uri: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class TextPart(BaseModel):
    """Text message part.

    Attributes:
        type: Message part type identifier
        text: The text content
        metadata: Optional part metadata
    """

    type: Literal["text"] = "text"
    text: str
    metadata: Optional[dict[str, Any]] = None

    model_config = ConfigDict(frozen=True)


class FilePart(BaseModel):
    """File message part.

    Attributes:
        type: Message part type identifier
        file: The file payload
        metadata: Optional part metadata
    """

    type: Literal["file"] = "file"
    file: FileContent
    metadata: Optional[dict[str, Any]] = None

    model_config = ConfigDict(frozen=True)


class DataPart(BaseModel):
    """Structured data message part.

    Attributes:
        type: Message part type identifier
        data: The structured data
        metadata: Optional part metadata
    """

    type: Literal["data"] = "data"
    data: dict[str, Any]
    metadata: Optional[dict[str, Any]] = None

    model_config = ConfigDict(frozen=True)


# Union type for all message parts, discriminated on the "type" field
Part = Annotated[Union[TextPart, FilePart, DataPart], Field(discriminator="type")]


class Message(BaseModel):
    """A message exchanged between a caller and an agent.

    Messages are immutable once constructed; task history only ever grows
    by appending new Message objects.

    Attributes:
        role: Sender role (user, agent or system)
        parts: Ordered list of message parts
        metadata: Optional message metadata
    """

    role: Literal["user", "agent", "system"]
    parts: list[Part]
    metadata: Optional[dict[str, Any]] = None

    model_config = ConfigDict(frozen=True)


class Artifact(BaseModel):
    """Side-channel output attached to a task.

    Attributes:
        name: Optional artifact name (e.g. "agent_selection")
        description: Optional human-readable description
        parts: Content of the artifact
        index: Position of the artifact in a sequence
        append: Whether the artifact appends to a previous one
        last_chunk: Whether this is the last chunk of the artifact
        metadata: Optional artifact metadata
    """

    name: Optional[str] = None
    description: Optional[str] = None
    parts: list[Part]
    index: int = 0
    append: Optional[bool] = None
    last_chunk: Optional[bool] = Field(default=None, alias="lastChunk")
    metadata: Optional[dict[str, Any]] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class AgentProvider(BaseModel):
    """Organization that operates an agent."""

    organization: str
    url: Optional[str] = None


class AgentAuthentication(BaseModel):
    """Authentication requirements advertised by an agent."""

    required: bool = False
    type: Optional[str] = None
    instructions: Optional[str] = None


class AgentCapabilities(BaseModel):
    """Capabilities advertised by an agent.

    These flags are descriptive only; the runtime does not enforce them.

    Attributes:
        streaming: Whether the agent supports streaming responses
        push_notifications: Whether the agent can send push notifications
        state_transition_history: Whether task history is kept per transition
    """

    streaming: bool = False
    push_notifications: bool = Field(default=False, alias="pushNotifications")
    state_transition_history: bool = Field(default=False, alias="stateTransitionHistory")

    model_config = ConfigDict(populate_by_name=True)


class AgentSkill(BaseModel):
    """A named capability tag used for routing.

    Attributes:
        name: Skill name
        description: Optional description of the skill
        input_modes: Optional supported input modes
        output_modes: Optional supported output modes
    """

    name: str
    description: Optional[str] = None
    input_modes: Optional[list[str]] = Field(default=None, alias="inputModes")
    output_modes: Optional[list[str]] = Field(default=None, alias="outputModes")

    model_config = ConfigDict(populate_by_name=True)


class AgentCard(BaseModel):
    """A2A agent discovery document served at ``.well-known/agent.json``.

    The registry indexes cards by ``name``.

    Attributes:
        name: Unique agent name
        description: Optional agent description
        url: Base RPC endpoint of the agent
        provider: Optional operating organization
        version: Agent version string
        documentation_url: Optional documentation link
        capabilities: Advertised capabilities
        authentication: Optional authentication requirements
        default_input_modes: Default input modes for all skills
        default_output_modes: Default output modes for all skills
        skills: Skills offered by the agent
    """

    name: str
    description: Optional[str] = None
    url: str
    provider: Optional[AgentProvider] = None
    version: str
    documentation_url: Optional[str] = Field(default=None, alias="documentationUrl")
    capabilities: AgentCapabilities
    authentication: Optional[AgentAuthentication] = None
    default_input_modes: list[str] = Field(
        default_factory=lambda: ["text"], alias="defaultInputModes"
    )
    default_output_modes: list[str] = Field(
        default_factory=lambda: ["text"], alias="defaultOutputModes"
    )
    skills: list[AgentSkill]

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize the card with camelCase field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def is_valid_agent_card(card: Any) -> bool:
    """Check that a card carries every field the registry relies on.

    Accepts raw mappings (as fetched from the wire) as well as AgentCard
    instances. A valid card has string ``name``, ``url`` and ``version``
    fields, a ``capabilities`` object and a non-empty ``skills`` list.

    Args:
        card: Candidate card

    Returns:
        True if the card is usable for registration
    """
    if isinstance(card, AgentCard):
        card = card.model_dump(by_alias=True)
    if not isinstance(card, Mapping):
        return False

    capabilities = card.get("capabilities")
    skills = card.get("skills")
    return (
        isinstance(card.get("name"), str)
        and isinstance(card.get("url"), str)
        and isinstance(card.get("version"), str)
        and isinstance(capabilities, Mapping)
        and isinstance(skills, list)
        and len(skills) > 0
    )
