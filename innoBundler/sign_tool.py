"""Sign tool settings and their resolution from descriptor and overrides."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from innoBundler.constants import (
    DEFAULT_SIGN_TOOL_NAME,
    DEFAULT_SIGN_TOOL_RETRY_COUNT,
    DEFAULT_SIGN_TOOL_RETRY_DELAY,
)
from innoBundler.validation import validate_non_negative_int


@dataclass(frozen=True)
class SignTool:
    """External signer invoked by the Inno Setup compiler.

    Parameters:
        name: Sign tool name registered with the compiler.
        command: Command line the compiler runs to sign files.
        params: Extra parameters appended to the ``SignTool`` directive.
        retry_count: Number of retries when signing fails.
        retry_delay: Delay between retries in milliseconds.
    """

    name: str
    command: str = ""
    params: str = ""
    retry_count: int = DEFAULT_SIGN_TOOL_RETRY_COUNT
    retry_delay: int = DEFAULT_SIGN_TOOL_RETRY_DELAY

    def directives(self) -> list[str]:
        """Return the ``[Setup]`` directives for this sign tool.

        Returns:
            Directive lines.
        """

        return [
            f"SignTool={self.name} {self.params}".rstrip(),
            f"SignToolRetryCount={self.retry_count}",
            f"SignToolRetryDelay={self.retry_delay}",
        ]

    def compiler_argument(self) -> str:
        """Return the ``/S`` argument that defines this tool for ISCC.

        Returns:
            Compiler argument string.
        """

        return f"/S{self.name}={self.command}"


def validate_sign_tool(
    option: Any,
    name: Optional[str] = None,
    command: Optional[str] = None,
    params: Optional[str] = None,
) -> Optional[str]:
    """Validate the ``sign_tool`` option.

    Parameters:
        option: Raw option value: None, a command string or a mapping.
        name: Command-line override for the tool name.
        command: Command-line override for the tool command.
        params: Command-line override for the tool parameters.

    Returns:
        Error message, or None when the option is usable.
    """

    if option is None:
        if name is None and command is None and params is None:
            return None
        option_map: dict = {}
    elif isinstance(option, str):
        option_map = {"command": option}
    elif isinstance(option, dict):
        option_map = option
    else:
        return (
            "inno_bundle.sign_tool is invalid: expected a command string or a "
            "mapping with name/command/params fields."
        )
    for key in ("name", "command", "params"):
        value = option_map.get(key)
        if value is not None and not isinstance(value, str):
            return f"inno_bundle.sign_tool.{key} must be a string."
    for key in ("retry_count", "retry_delay"):
        if key in option_map:
            result = validate_non_negative_int(option_map[key], f"inno_bundle.sign_tool.{key}")
            if not result.is_valid():
                return result.error

    # A mapping must name the tool itself; shorthand forms get the default name.
    default_name = None if option_map is option else DEFAULT_SIGN_TOOL_NAME
    effective_name = name if name is not None else option_map.get("name", default_name)
    effective_command = command if command is not None else option_map.get("command")
    if not effective_name and not effective_command:
        return (
            "inno_bundle.sign_tool is expected to be a command string or to "
            "have at least a non-empty name or command field."
        )
    return None


def build_sign_tool(
    option: Any,
    name: Optional[str] = None,
    command: Optional[str] = None,
    params: Optional[str] = None,
) -> Optional[SignTool]:
    """Build the sign tool from a validated option and overrides.

    Overrides always win over the descriptor. Overrides alone are enough to
    enable signing when the descriptor has no ``sign_tool`` entry.

    Parameters:
        option: Raw option value already accepted by ``validate_sign_tool``.
        name: Command-line override for the tool name.
        command: Command-line override for the tool command.
        params: Command-line override for the tool parameters.

    Returns:
        SignTool instance, or None when signing is not configured.
    """

    if option is None:
        if name is None and command is None and params is None:
            return None
        option = {}
    elif isinstance(option, str):
        option = {"command": option}
    return SignTool(
        name=name if name is not None else option.get("name") or DEFAULT_SIGN_TOOL_NAME,
        command=command if command is not None else option.get("command") or "",
        params=params if params is not None else option.get("params") or "",
        retry_count=option.get("retry_count", DEFAULT_SIGN_TOOL_RETRY_COUNT),
        retry_delay=option.get("retry_delay", DEFAULT_SIGN_TOOL_RETRY_DELAY),
    )
