"""Uniform command and outcome models.

DeviceCommand is the family-independent request a manager hands to an
adapter. CommandOutcome is what comes back: success, or one typed failure.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from device_hub.core.interfaces.adapter import DeviceError


class FailureKind(str, Enum):
    """Typed failure categories for commands and fetches."""

    UNREACHABLE = "unreachable"
    PROTOCOL_ERROR = "protocol_error"
    UNAUTHORIZED = "unauthorized"
    UNSUPPORTED = "unsupported"
    NOT_FOUND = "not_found"


CommandType = Literal[
    "power",
    "toggle_power",
    "set_volume",
    "volume_up",
    "volume_down",
    "set_mute",
    "toggle_mute",
    "select_input",
    "list_inputs",
    "remote",
    "navigate",
    "media",
    "send_key",
    "button",
    "launch_app",
    "stop_app",
    "terminate_apps",
    "list_apps",
    "send_text",
    "open_url",
    "get_sound_settings",
    "set_sound_setting",
    "picture",
    "set_led",
    "system_info",
    "reboot",
]

# Commands that only read from the device and leave its state untouched
QUERY_COMMANDS: frozenset[str] = frozenset(
    {"list_inputs", "list_apps", "get_sound_settings", "system_info"}
)


class DeviceCommand(BaseModel):
    """Family-independent device command.

    Attributes:
        action: Uniform command name
        args: Command arguments (level, direction, app, ...)

    Examples:
        >>> DeviceCommand(action="power", args={"on": True})
        >>> DeviceCommand(action="set_volume", args={"level": 25})
        >>> DeviceCommand(action="launch_app", args={"app": "netflix"})
    """

    action: CommandType = Field(..., description="Uniform command name")

    args: dict[str, Any] = Field(default_factory=dict, description="Command arguments")

    @property
    def is_query(self) -> bool:
        """Check if the command only reads device data."""
        return self.action in QUERY_COMMANDS

    def arg(self, key: str, default: Any = None) -> Any:
        """Get a command argument with optional default."""
        return self.args.get(key, default)

    class Config:
        """Pydantic model configuration."""

        frozen = True
        json_schema_extra = {
            "examples": [
                {"action": "power", "args": {"on": True}},
                {"action": "set_volume", "args": {"level": 25}},
                {"action": "navigate", "args": {"direction": "up"}},
            ]
        }


class CommandOutcome(BaseModel):
    """Result of executing a DeviceCommand.

    Attributes:
        success: Whether the command completed
        device: Target device name
        action: Command that was executed
        error: Failure category when success is False
        message: Human-readable status or error message
        data: Result payload for query commands
    """

    success: bool = Field(..., description="Whether the command succeeded")

    device: str = Field(..., description="Target device name")

    action: str = Field(..., description="Executed command name")

    error: FailureKind | None = Field(default=None, description="Failure category")

    message: str | None = Field(default=None, description="Status or error message")

    data: Any = Field(default=None, description="Result payload")

    @classmethod
    def ok(
        cls,
        device: str,
        action: str,
        message: str | None = None,
        data: Any = None,
    ) -> CommandOutcome:
        """Create a successful outcome.

        Args:
            device: Target device name
            action: Executed command name
            message: Optional status message
            data: Optional result payload

        Returns:
            CommandOutcome with success=True
        """
        return cls(success=True, device=device, action=action, message=message, data=data)

    @classmethod
    def failure(
        cls,
        device: str,
        action: str,
        error: FailureKind,
        message: str,
    ) -> CommandOutcome:
        """Create a failed outcome.

        Args:
            device: Target device name
            action: Executed command name
            error: Failure category
            message: Error message

        Returns:
            CommandOutcome with success=False
        """
        return cls(success=False, device=device, action=action, error=error, message=message)

    @classmethod
    def from_error(cls, device: str, action: str, exc: DeviceError) -> CommandOutcome:
        """Create a failed outcome from a typed device error."""
        return cls.failure(device, action, exc.kind, str(exc))
