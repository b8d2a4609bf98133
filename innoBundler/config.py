"""Resolution of the ``inno_bundle`` descriptor block into a configuration.

The project descriptor (usually ``pubspec.yaml``) holds an ``inno_bundle``
mapping next to outer fields such as ``name``, ``version``, ``description``,
``maintainer`` and ``homepage`` which act as fallbacks. Every value is checked
for its expected type before use; any violation raises ``ConfigurationError``
with a message naming the offending field.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from innoBundler.constants import (
    CONFIG_SECTION,
    DEFAULT_INSTALLER_ICON,
    DEFAULT_LICENSE_FILE,
    UUID_PATTERN,
    VALID_FILENAME_PATTERN,
)
from innoBundler.errors import ConfigurationError
from innoBundler.languages import Language
from innoBundler.options import BuildArch, BuildType, PrivilegeMode
from innoBundler.sign_tool import SignTool, build_sign_tool, validate_sign_tool
from innoBundler.utils import camel_case, load_yaml_config
from innoBundler.validation import ValidationResult

_GUID_HINT = "Run `innoBundler guid` to generate a new one and put it in the project descriptor."

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildOverrides:
    """Values supplied on the command line that take precedence.

    Parameters:
        build_type: Build variant.
        app: Whether the application files are built and included.
        installer: Whether the installer step runs.
        build_args: Extra arguments passed to the upstream build.
        app_version: Version replacing the descriptor version.
        sign_tool_name: Sign tool name override.
        sign_tool_command: Sign tool command override.
        sign_tool_params: Sign tool parameters override.
    """

    build_type: BuildType = BuildType.DEBUG
    app: bool = True
    installer: bool = True
    build_args: Optional[str] = None
    app_version: Optional[str] = None
    sign_tool_name: Optional[str] = None
    sign_tool_command: Optional[str] = None
    sign_tool_params: Optional[str] = None


@dataclass(frozen=True)
class Configuration:
    """Fully resolved installer configuration.

    Parameters:
        id: Application UUID used as the Inno Setup ``AppId``.
        declared_name: Name given by the upstream build to the executable.
        name: Display name of the installed application.
        description: Application description.
        version: Application version.
        publisher: Publisher or maintainer name.
        url: Homepage URL.
        support_url: Support URL.
        updates_url: Updates URL.
        installer_icon: Absolute icon path or ``DEFAULT_INSTALLER_ICON``.
        license_file: Absolute license path or an empty string.
        sign_tool: Sign tool settings, or None when unsigned.
        languages: Installer languages, never empty.
        admin: Requested privilege mode.
        arch: Target CPU architecture.
        build_type: Build variant.
        app: Whether the application files are included.
        installer: Whether the installer step runs.
        build_args: Extra arguments passed to the upstream build.
        run_args: Arguments for launching after a normal install.
        run_if_silent_mode: Whether to launch after a silent install.
        run_silent_args: Arguments for launching after a silent install.
        append_section_code: Raw text appended to the ``[Code]`` section.
    """

    id: str
    declared_name: str
    name: str
    description: str
    version: str
    publisher: str
    url: str
    support_url: str
    updates_url: str
    installer_icon: str
    license_file: str
    sign_tool: Optional[SignTool]
    languages: Tuple[Language, ...]
    admin: PrivilegeMode
    arch: BuildArch
    build_type: BuildType = BuildType.DEBUG
    app: bool = True
    installer: bool = True
    build_args: Optional[str] = None
    run_args: Optional[Tuple[str, ...]] = None
    run_if_silent_mode: bool = False
    run_silent_args: Optional[Tuple[str, ...]] = None
    append_section_code: Optional[str] = None

    @property
    def exe_name(self) -> str:
        """Return the installed executable file name."""

        return f"{self.name}.exe"

    @property
    def declared_exe_name(self) -> str:
        """Return the executable file name produced by the upstream build."""

        return f"{self.declared_name}.exe"

    @property
    def camel_case_name(self) -> str:
        """Return the display name without separators."""

        return camel_case(self.name)

    @property
    def launch_on_normal_completion(self) -> bool:
        """Return True when the app is launched after an interactive install."""

        return self.run_args is not None

    @property
    def uses_default_icon(self) -> bool:
        """Return True when the bundled icon replaces a configured one."""

        return self.installer_icon == DEFAULT_INSTALLER_ICON

    def to_environment_variables(self) -> str:
        """Render the configuration as ``KEY=value`` lines.

        Returns:
            Newline-separated environment variable assignments.
        """

        variables = {
            "APP_ID": self.id,
            "PUBSPEC_NAME": self.declared_name,
            "APP_NAME": self.name,
            "APP_NAME_CAMEL_CASE": self.camel_case_name,
            "APP_DESCRIPTION": self.description,
            "APP_VERSION": self.version,
            "APP_PUBLISHER": self.publisher,
            "APP_URL": self.url,
            "APP_SUPPORT_URL": self.support_url,
            "APP_UPDATES_URL": self.updates_url,
            "APP_INSTALLER_ICON": self.installer_icon,
            "APP_LANGUAGES": ",".join(language.locale for language in self.languages),
            "APP_ADMIN": self.admin.value,
            "APP_ARCH": self.arch.option,
            "APP_TYPE": self.build_type.value,
            "APP_BUILD_APP": str(self.app).lower(),
            "APP_BUILD_INSTALLER": str(self.installer).lower(),
        }
        return "\n".join(f"{key}={value}" for key, value in variables.items())


def _require(result: ValidationResult) -> Any:
    """Return the value of a validation result or raise.

    Parameters:
        result: Validation result.

    Returns:
        The validated value.
    """

    if not result.is_valid():
        raise ConfigurationError(result.error)
    return result.value


def _optional_str(section: Dict[str, Any], key: str, label: str) -> Optional[str]:
    """Read an optional string field.

    Parameters:
        section: Mapping to read from.
        key: Field name.
        label: Qualified field name for error messages.

    Returns:
        The string value or None when absent.
    """

    value = section.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigurationError(f"{label} is invalid: expected a string, got {value!r}.")
    return value


def _optional_str_list(section: Dict[str, Any], key: str, label: str) -> Optional[Tuple[str, ...]]:
    """Read an optional list-of-strings field.

    Parameters:
        section: Mapping to read from.
        key: Field name.
        label: Qualified field name for error messages.

    Returns:
        Tuple of strings or None when absent.
    """

    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigurationError(f"{label} is invalid: only a list of strings is allowed.")
    return tuple(value)


def _first_str(candidates: Tuple[Tuple[Any, str], ...], missing_message: str) -> str:
    """Return the first present candidate, which must be a string.

    Parameters:
        candidates: Pairs of (value, qualified field name) in precedence order.
        missing_message: Message raised when every candidate is absent.

    Returns:
        The selected string.
    """

    for value, label in candidates:
        if value is None:
            continue
        if not isinstance(value, str):
            raise ConfigurationError(f"{label} is invalid: expected a string, got {value!r}.")
        return value
    raise ConfigurationError(missing_message)


def _resolve_id(section: Dict[str, Any]) -> str:
    app_id = section.get("id")
    if not isinstance(app_id, str):
        raise ConfigurationError(f"inno_bundle.id attribute is missing. {_GUID_HINT}")
    if not UUID_PATTERN.match(app_id):
        raise ConfigurationError(f"inno_bundle.id {app_id!r} is not a valid UUID. {_GUID_HINT}")
    return app_id


def _resolve_display_name(section: Dict[str, Any], declared_name: str) -> str:
    name = _optional_str(section, "name", "inno_bundle.name")
    label = "inno_bundle.name"
    if name is None:
        name, label = declared_name, "name"
    if not VALID_FILENAME_PATTERN.match(name):
        raise ConfigurationError(
            f"{label} is invalid: {name!r} is not a valid file name "
            "(avoid path separators, reserved characters and a trailing dot or space)."
        )
    return name


def _resolve_installer_icon(section: Dict[str, Any], project_dir: Path) -> str:
    icon = _optional_str(section, "installer_icon", "inno_bundle.installer_icon")
    if icon is None:
        return DEFAULT_INSTALLER_ICON
    icon_path = project_dir / icon
    if not icon_path.is_file():
        raise ConfigurationError(
            f"inno_bundle.installer_icon is invalid: {icon_path} does not exist."
        )
    return str(icon_path)


def _resolve_license_file(section: Dict[str, Any], project_dir: Path) -> str:
    license_file = _optional_str(section, "license_file", "inno_bundle.license_file")
    license_path = project_dir / (license_file or DEFAULT_LICENSE_FILE)
    if not license_path.is_file():
        _LOGGER.debug("License file %s not found; installer has no license page.", license_path)
        return ""
    return str(license_path)


def _resolve_run_if_silent_mode(section: Dict[str, Any]) -> bool:
    value = section.get("run_if_silent_mode", False)
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"inno_bundle.run_if_silent_mode is invalid: expected true or false, got {value!r}."
        )
    return value


def resolve_config(
    descriptor: Dict[str, Any],
    overrides: Optional[BuildOverrides] = None,
    project_dir: Optional[Path] = None,
) -> Configuration:
    """Resolve a project descriptor into a validated configuration.

    Parameters:
        descriptor: Parsed project descriptor.
        overrides: Command-line overrides.
        project_dir: Directory relative paths are resolved against
            (defaults to the current working directory).

    Returns:
        Resolved Configuration.

    Raises:
        ConfigurationError: If any field is missing or malformed.
    """

    overrides = overrides or BuildOverrides()
    project_dir = Path(project_dir or Path.cwd()).resolve()
    if not isinstance(descriptor, dict):
        raise ConfigurationError("Project descriptor must be a mapping.")
    section = descriptor.get(CONFIG_SECTION)
    if not isinstance(section, dict):
        raise ConfigurationError(f"{CONFIG_SECTION} section is missing from the project descriptor.")

    app_id = _resolve_id(section)
    declared_name = descriptor.get("name")
    if not isinstance(declared_name, str) or not declared_name:
        raise ConfigurationError("name attribute is missing from the project descriptor.")
    name = _resolve_display_name(section, declared_name)

    version = _first_str(
        (
            (overrides.app_version, "--app-version"),
            (section.get("version"), "inno_bundle.version"),
            (descriptor.get("version"), "version"),
        ),
        "version attribute is missing from the project descriptor.",
    )
    description = _first_str(
        (
            (section.get("description"), "inno_bundle.description"),
            (descriptor.get("description"), "description"),
        ),
        "description or inno_bundle.description attribute is missing from the project descriptor.",
    )
    publisher = _first_str(
        (
            (section.get("publisher"), "inno_bundle.publisher"),
            (descriptor.get("maintainer"), "maintainer"),
        ),
        "maintainer or inno_bundle.publisher attribute is missing from the project descriptor.",
    )

    url = _optional_str(section, "url", "inno_bundle.url")
    if url is None:
        url = _optional_str(descriptor, "homepage", "homepage") or ""
    support_url = _optional_str(section, "support_url", "inno_bundle.support_url")
    updates_url = _optional_str(section, "updates_url", "inno_bundle.updates_url")

    installer_icon = _resolve_installer_icon(section, project_dir)

    languages_option = section.get("languages")
    if languages_option is not None and not isinstance(languages_option, list):
        raise ConfigurationError(
            "inno_bundle.languages is invalid: only a list of strings is allowed."
        )
    languages = _require(Language.parse_list(languages_option))
    admin = _require(PrivilegeMode.parse(section.get("admin")))
    license_file = _resolve_license_file(section, project_dir)

    sign_tool_option = section.get("sign_tool")
    sign_tool_error = validate_sign_tool(
        sign_tool_option,
        name=overrides.sign_tool_name,
        command=overrides.sign_tool_command,
        params=overrides.sign_tool_params,
    )
    if sign_tool_error is not None:
        raise ConfigurationError(sign_tool_error)
    sign_tool = build_sign_tool(
        sign_tool_option,
        name=overrides.sign_tool_name,
        command=overrides.sign_tool_command,
        params=overrides.sign_tool_params,
    )

    arch = _require(BuildArch.parse(section.get("arch")))

    return Configuration(
        id=app_id,
        declared_name=declared_name,
        name=name,
        description=description,
        version=version,
        publisher=publisher,
        url=url,
        support_url=support_url if support_url is not None else url,
        updates_url=updates_url if updates_url is not None else url,
        installer_icon=installer_icon,
        license_file=license_file,
        sign_tool=sign_tool,
        languages=languages,
        admin=admin,
        arch=arch,
        build_type=overrides.build_type,
        app=overrides.app,
        installer=overrides.installer,
        build_args=overrides.build_args,
        run_args=_optional_str_list(section, "run_args", "inno_bundle.run_args"),
        run_if_silent_mode=_resolve_run_if_silent_mode(section),
        run_silent_args=_optional_str_list(section, "run_silent_args", "inno_bundle.run_silent_args"),
        append_section_code=_optional_str(
            section, "append_section_code", "inno_bundle.append_section_code"
        ),
    )


def load_config(
    descriptor_path: Path,
    overrides: Optional[BuildOverrides] = None,
    project_dir: Optional[Path] = None,
) -> Configuration:
    """Load a YAML project descriptor and resolve it.

    Parameters:
        descriptor_path: Path to the descriptor file.
        overrides: Command-line overrides.
        project_dir: Directory relative paths are resolved against
            (defaults to the descriptor's directory).

    Returns:
        Resolved Configuration.

    Raises:
        ConfigurationError: If the file cannot be read or resolved.
    """

    descriptor_path = Path(descriptor_path)
    try:
        descriptor = load_yaml_config(descriptor_path)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read project descriptor {descriptor_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Project descriptor {descriptor_path} is not valid YAML: {exc}") from exc
    if project_dir is None:
        project_dir = descriptor_path.resolve().parent
    return resolve_config(descriptor, overrides, project_dir)
