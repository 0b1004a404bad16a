from typing import Literal, Optional

from models.base import FrozenCamelModel

ChangeType = Literal["insert", "delete", "replace"]
EventSource = Literal["live", "history", "external"]
ToolType = Literal["claude-code", "copilot", "cursor", "unknown"]

CHANGE_TYPES = ("insert", "delete", "replace")
EVENT_SOURCES = ("live", "history", "external")
TOOL_TYPES = ("claude-code", "copilot", "cursor", "unknown")

# languageConstruct values that carry no structural information
UNKNOWN_CONSTRUCTS = ("unknown", "")


class Position(FrozenCamelModel):
    line: int
    character: int


class SelectionRange(FrozenCamelModel):
    start: Position
    end: Position


class ExternalToolSignature(FrozenCamelModel):
    detected: bool
    tool_type: ToolType = "unknown"
    confidence: float = 0.0     # 0.0 - 1.0
    indicators: list[str] = []


class EditEvent(FrozenCamelModel):
    """One observed text mutation, as recorded by the capture layer.

    The timing and behavioural fields are computed upstream and trusted as
    given; nothing here is recomputed from ``timestamp``.
    """

    # identity
    event_id: str
    session_id: str
    file_uri: str

    # temporal (ms)
    timestamp: int
    time_since_last_change: float
    time_since_session_start: float
    time_since_file_open: float

    # change description
    change_type: ChangeType
    position: Position
    content_length: int
    content: Optional[str] = None   # stripped before persistence

    # editor context
    source: EventSource
    vs_code_active: bool
    cursor_position: Position
    selection_range: Optional[SelectionRange] = None

    # velocity (chars/minute)
    instant_typing_speed: float
    rolling_typing_speed: float
    burst_detected: bool
    pause_before_change: float

    # content analysis
    is_code_block: bool
    is_comment: bool
    is_whitespace: bool
    language_construct: str     # "function" | "class" | "variable" | "import" | "export" | "unknown"
    indentation_level: int

    external_tool_signature: Optional[ExternalToolSignature] = None

    @property
    def has_external_signature(self) -> bool:
        return self.external_tool_signature is not None and self.external_tool_signature.detected

    @property
    def has_known_construct(self) -> bool:
        return self.language_construct not in UNKNOWN_CONSTRUCTS
