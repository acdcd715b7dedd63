# src/scriptshell/model.py (Shell Layer)
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Command(BaseModel):
    """A tokenized command line: the command name plus its argument tokens."""
    model_config = ConfigDict(frozen=True)

    name: str
    args: Tuple[str, ...] = ()
    line: str = ""

    @classmethod
    def from_tokens(cls, tokens: List[str], line: Optional[str] = None) -> "Command":
        return cls(name=tokens[0], args=tuple(tokens[1:]), line=line if line is not None else " ".join(tokens))

    @property
    def tokens(self) -> List[str]:
        return [self.name, *self.args]


class DispatchStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    NO_COMMAND = "no_command"


class DispatchResult(BaseModel):
    """Outcome of dispatching a single command line."""
    line: str
    command: Optional[Command] = None
    status: DispatchStatus
    exit_code: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True for successful commands and for blank lines."""
        return self.status != DispatchStatus.FAILURE

    def __bool__(self) -> bool:
        return self.ok


class BindingKind(str, Enum):
    FUNCTION = "function"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRUCTURED = "structured"
    OBJECT = "object"
    NONE = "none"


class Binding(BaseModel):
    """Tagged view of a single name bound in a scripting environment."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    kind: BindingKind
    value: Any = Field(default=None, exclude=True, repr=False)
    summary: str = ""


class EnvironmentInfo(BaseModel):
    handle: str
    persistent: bool
    loads: int = 0
    bindings: int = 0
    created_at: datetime = Field(default_factory=datetime.now)


class ScriptResult(BaseModel):
    """What a script load produced."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    environment: str
    retained: bool
    value: Any = None
    defined: List[str] = Field(default_factory=list)


class PluginInfo(BaseModel):
    name: str
    commands: List[str] = Field(default_factory=list)
    source: str = "builtin"
