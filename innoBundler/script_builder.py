"""Inno Setup script generation from a resolved configuration."""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from innoBundler.assets import persist_default_installer_icon, stage_redistributables
from innoBundler.config import Configuration
from innoBundler.constants import (
    INSTALLER_BUILD_DIR,
    SCRIPT_FILE_NAME,
    SCRIPT_HEADER,
    SYSTEM_LIBRARY_DIRS,
)
from innoBundler.errors import ScriptSynthesisError
from innoBundler.options import PrivilegeMode

_IS_SILENT_INSTALL_FUNCTION = """\
function IsSilentInstall(): Boolean;
begin
  Result := WizardSilent();
end;"""


@dataclass(frozen=True)
class ScriptArtifact:
    """Generated script and its location.

    Parameters:
        path: Absolute path of the written script.
        text: Script content.
    """

    path: Path
    text: str


def escape_constant_argument(value: str) -> str:
    """Escape text used as an argument of an Inno Setup ``{cm:...}`` constant.

    Parameters:
        value: Raw text.

    Returns:
        Text with ``%``, ``,``, ``|`` and ``}`` percent-encoded and ``&`` doubled.
    """

    for raw, encoded in (("%", "%25"), (",", "%2c"), ("|", "%7c"), ("}", "%7d")):
        value = value.replace(raw, encoded)
    return value.replace("&", "&&")


def _quote_parameters(args: Sequence[str]) -> str:
    """Join run arguments into a quoted ``Parameters`` value.

    Arguments that are empty or contain whitespace are wrapped in double
    quotes so the application receives each one unsplit.
    """

    words = [f'"{arg}"' if not arg or any(char.isspace() for char in arg) else arg for arg in args]
    return '"' + " ".join(words).replace('"', '""') + '"'


def installer_output_dir(config: Configuration, project_dir: Path) -> Path:
    """Return the directory receiving the script and compiled installer.

    Parameters:
        config: Resolved configuration.
        project_dir: Project root directory.

    Returns:
        Absolute output directory for the configured build variant.
    """

    return Path(project_dir).resolve().joinpath(*INSTALLER_BUILD_DIR, config.build_type.dir_name)


def compiler_command(config: Configuration, script_path: Path, iscc: str = "ISCC") -> List[str]:
    """Assemble the Inno Setup compiler command line for a script.

    Parameters:
        config: Resolved configuration.
        script_path: Path of the generated script.
        iscc: Compiler executable.

    Returns:
        Command line as a list of arguments.
    """

    command = [iscc]
    if config.sign_tool is not None:
        command.append(config.sign_tool.compiler_argument())
    command.append(str(script_path))
    return command


class ScriptBuilder:
    """Build the Inno Setup script for an application build directory."""

    def __init__(
        self,
        config: Configuration,
        app_dir: Path,
        project_dir: Optional[Path] = None,
        temp_dir: Optional[Path] = None,
        system_dirs: Optional[Iterable[Path]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the builder.

        Parameters:
            config: Resolved configuration.
            app_dir: Directory holding the application build output.
            project_dir: Project root (defaults to the working directory).
            temp_dir: Parent of the staging directory (defaults to the system temp dir).
            system_dirs: Directories searched for redistributable libraries.
            logger: Logger instance.
        """

        self._config = config
        self._app_dir = Path(app_dir)
        self._project_dir = Path(project_dir or Path.cwd()).resolve()
        self._temp_dir = Path(temp_dir or tempfile.gettempdir())
        self._system_dirs = tuple(system_dirs if system_dirs is not None else SYSTEM_LIBRARY_DIRS)
        self._logger = logger or logging.getLogger(__name__)

    @property
    def config(self) -> Configuration:
        """Return the configuration the script is built from."""

        return self._config

    @property
    def staging_dir(self) -> Path:
        """Return the staging directory for the default icon and libraries."""

        return (self._temp_dir / f"{self._config.camel_case_name}Installer").absolute()

    @property
    def output_dir(self) -> Path:
        """Return the output directory of the configured variant."""

        return installer_output_dir(self._config, self._project_dir)

    @property
    def script_path(self) -> Path:
        """Return the path the script is written to."""

        return self.output_dir / SCRIPT_FILE_NAME

    def build(self) -> ScriptArtifact:
        """Stage assets, render the script and write it.

        Returns:
            ScriptArtifact with the written path and text.

        Raises:
            ScriptSynthesisError: If the build output is missing or a file
                operation fails.
        """

        self._logger.info("Generating Inno Setup script...")
        if not self._app_dir.is_dir():
            raise ScriptSynthesisError(f"Application build directory {self._app_dir} does not exist.")
        try:
            icon_path = self._resolve_installer_icon()
            libraries = stage_redistributables(
                self._system_dirs,
                self.staging_dir / self._config.build_type.dir_name,
                logger=self._logger,
            )
            text = self.render(icon_path, libraries)
            script_path = self.script_path
            script_path.parent.mkdir(parents=True, exist_ok=True)
            script_path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ScriptSynthesisError(f"Failed to generate installer script: {exc}") from exc
        self._logger.info("Script generated at %s", script_path)
        return ScriptArtifact(path=script_path, text=text)

    def render(self, installer_icon: str, libraries: Sequence[Path] = ()) -> str:
        """Render the full script text.

        Parameters:
            installer_icon: Icon path written to ``SetupIconFile``.
            libraries: Staged redistributable libraries added to ``[Files]``.

        Returns:
            Script content.
        """

        sections = [
            self._setup(installer_icon),
            self._install_delete(),
            self._languages(),
            self._tasks(),
            self._files(libraries),
            self._icons(),
            self._run(),
            self._code(),
        ]
        return SCRIPT_HEADER + "\n\n".join(sections) + "\n"

    def _resolve_installer_icon(self) -> str:
        if not self._config.uses_default_icon:
            return self._config.installer_icon
        return str(persist_default_installer_icon(self.staging_dir, logger=self._logger))

    def _setup(self, installer_icon: str) -> str:
        config = self._config
        lines = [
            "[Setup]",
            f"AppId={config.id}",
            f"AppName={config.name}",
            f"UninstallDisplayName={config.name}",
            f"UninstallDisplayIcon={{app}}\\{config.exe_name}",
            f"AppVersion={config.version}",
            f"AppPublisher={config.publisher}",
            f"AppPublisherURL={config.url}",
            f"AppSupportURL={config.support_url}",
            f"AppUpdatesURL={config.updates_url}",
        ]
        if config.license_file:
            lines.append(f"LicenseFile={config.license_file}")
        lines.append(f"DefaultDirName={{autopf}}\\{config.name}")
        if config.admin is PrivilegeMode.NON_ADMIN:
            lines.append("PrivilegesRequired=lowest")
        else:
            lines.append("PrivilegesRequired=admin")
        if config.admin is PrivilegeMode.AUTO:
            lines.append("PrivilegesRequiredOverridesAllowed=dialog commandline")
        lines.extend(
            [
                f"OutputDir={self.output_dir}",
                f"OutputBaseFilename={config.camel_case_name}-{config.arch.cpu}-{config.version}-Installer",
                f"SetupIconFile={installer_icon}",
                "Compression=lzma2/max",
                "SolidCompression=yes",
                "WizardStyle=modern",
                f"ArchitecturesAllowed={config.arch.inno}",
                f"ArchitecturesInstallIn64BitMode={config.arch.inno}",
                "DisableDirPage=auto",
                "DisableProgramGroupPage=auto",
            ]
        )
        if config.sign_tool is not None:
            lines.extend(config.sign_tool.directives())
        return "\n".join(lines)

    def _install_delete(self) -> str:
        return '[InstallDelete]\nType: filesandordirs; Name: "{app}\\*"'

    def _languages(self) -> str:
        lines = ["[Languages]"]
        lines.extend(language.inno_entry() for language in self._config.languages)
        return "\n".join(lines)

    def _tasks(self) -> str:
        return (
            "[Tasks]\n"
            'Name: "desktopicon"; Description: "{cm:CreateDesktopIcon}"; '
            'GroupDescription: "{cm:AdditionalIcons}"'
        )

    def _files(self, libraries: Sequence[Path]) -> str:
        config = self._config
        lines = ["[Files]"]
        for entry in sorted(self._app_dir.iterdir(), key=lambda path: path.name):
            source = entry.absolute()
            if entry.is_dir():
                lines.append(
                    f'Source: "{source}\\*"; DestDir: "{{app}}\\{entry.name}"; '
                    "Flags: ignoreversion recursesubdirs createallsubdirs"
                )
            elif entry.name == config.declared_exe_name and config.exe_name != config.declared_exe_name:
                self._logger.info("Renamed %s to %s", config.declared_exe_name, config.exe_name)
                lines.append(
                    f'Source: "{source}"; DestDir: "{{app}}"; '
                    f'DestName: "{config.exe_name}"; Flags: ignoreversion'
                )
            else:
                lines.append(f'Source: "{source}"; DestDir: "{{app}}"; Flags: ignoreversion')
        for library in libraries:
            lines.append(f'Source: "{library}"; DestDir: "{{app}}"; Flags: ignoreversion')
        return "\n".join(lines)

    def _icons(self) -> str:
        config = self._config
        return (
            "[Icons]\n"
            f'Name: "{{autoprograms}}\\{config.name}"; Filename: "{{app}}\\{config.exe_name}"\n'
            f'Name: "{{autodesktop}}\\{config.name}"; Filename: "{{app}}\\{config.exe_name}"; '
            "Tasks: desktopicon"
        )

    def _run(self) -> str:
        config = self._config
        lines = ["[Run]"]
        target = f'Filename: "{{app}}\\{config.exe_name}";'
        description = f'Description: "{{cm:LaunchProgram,{escape_constant_argument(config.name)}}}";'
        if config.launch_on_normal_completion:
            parameters = ""
            if config.run_args:
                parameters = f" Parameters: {_quote_parameters(config.run_args)};"
            lines.append(
                f"{target}{parameters} {description} "
                "Flags: nowait postinstall skipifsilent; Check: not IsSilentInstall"
            )
        if config.run_if_silent_mode and config.run_silent_args is not None:
            parameters = ""
            if config.run_silent_args:
                parameters = f" Parameters: {_quote_parameters(config.run_silent_args)};"
            lines.append(
                f"{target}{parameters} {description} "
                "Flags: nowait postinstall; Check: IsSilentInstall"
            )
        return "\n".join(lines)

    def _code(self) -> str:
        lines = ["[Code]", _IS_SILENT_INSTALL_FUNCTION]
        appendix = (self._config.append_section_code or "").strip("\n")
        if appendix:
            lines.extend(["", appendix])
        return "\n".join(lines)
