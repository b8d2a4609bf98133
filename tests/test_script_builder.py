"""Tests for Inno Setup script generation."""

from __future__ import annotations

import copy
import logging
from pathlib import Path

import pytest

from innoBundler.config import BuildOverrides, resolve_config
from innoBundler.errors import ScriptSynthesisError
from innoBundler.languages import Language
from innoBundler.options import BuildType
from innoBundler.script_builder import (
    ScriptBuilder,
    compiler_command,
    escape_constant_argument,
)

SECTION_ORDER = [
    "[Setup]",
    "[InstallDelete]",
    "[Languages]",
    "[Tasks]",
    "[Files]",
    "[Icons]",
    "[Run]",
    "[Code]",
]


def _section(text: str, header: str) -> list[str]:
    """Return the lines of one script section.

    Parameters:
        text: Script text.
        header: Section header such as ``[Files]``.

    Returns:
        Lines after the header up to the next blank line.
    """

    lines = text.splitlines()
    start = lines.index(header) + 1
    section = []
    for line in lines[start:]:
        if not line.strip():
            break
        section.append(line)
    return section


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    """Create a fake application build output.

    Parameters:
        tmp_path: Pytest temporary directory.

    Returns:
        Build output directory.
    """

    build = tmp_path / "project" / "build" / "windows" / "x64" / "runner" / "Debug"
    (build / "data").mkdir(parents=True)
    (build / "data" / "app.so").write_bytes(b"so")
    (build / "demo_app.exe").write_bytes(b"MZ")
    (build / "flutter_windows.dll").write_bytes(b"MZ")
    return build


def _builder(descriptor: dict, tmp_path: Path, app_dir: Path, overrides=None, **fields) -> ScriptBuilder:
    """Resolve a descriptor and create a builder isolated in tmp_path.

    Parameters:
        descriptor: Base descriptor.
        tmp_path: Pytest temporary directory.
        app_dir: Application build output.
        overrides: Optional BuildOverrides.
        fields: inno_bundle fields to set.

    Returns:
        ScriptBuilder instance.
    """

    descriptor = copy.deepcopy(descriptor)
    descriptor["inno_bundle"].update(fields)
    project_dir = tmp_path / "project"
    project_dir.mkdir(exist_ok=True)
    config = resolve_config(descriptor, overrides, project_dir=project_dir)
    return ScriptBuilder(
        config,
        app_dir,
        project_dir=project_dir,
        temp_dir=tmp_path / "tmp",
        system_dirs=[tmp_path / "System32"],
    )


def test_end_to_end_demo_script(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Generate the demo script with identity and architecture directives."""

    artifact = _builder(descriptor, tmp_path, app_dir).build()
    setup = _section(artifact.text, "[Setup]")
    assert "AppId=f887d5f0-4690-1e07-8efc-d16ea7711bfb" in setup
    assert "AppName=Demo App" in setup
    assert "AppVersion=1.0.0" in setup
    assert "AppPublisher=Acme" in setup
    assert "ArchitecturesAllowed=x64compatible" in setup
    assert "ArchitecturesInstallIn64BitMode=x64compatible" in setup
    assert "OutputBaseFilename=DemoApp-x86_64-1.0.0-Installer" in setup
    assert "Compression=lzma2/max" in setup
    assert "SolidCompression=yes" in setup
    assert not any(line.startswith("LicenseFile=") for line in setup)
    assert not any(line.startswith("SignTool") for line in setup)
    assert artifact.path.read_text(encoding="utf-8") == artifact.text
    assert artifact.path == (
        tmp_path / "project" / "build" / "windows" / "x64" / "installer" / "Debug" / "inno-script.iss"
    ).resolve()


def test_empty_languages_list_every_language(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Generate the demo script with every language when the selection is empty."""

    artifact = _builder(descriptor, tmp_path, app_dir, languages=[]).build()
    setup = _section(artifact.text, "[Setup]")
    assert "AppId=f887d5f0-4690-1e07-8efc-d16ea7711bfb" in setup
    assert "AppName=Demo App" in setup
    assert "ArchitecturesAllowed=x64compatible" in setup
    languages = _section(artifact.text, "[Languages]")
    assert languages == [language.inno_entry() for language in Language]
    assert 'Name: "english"; MessagesFile: "compiler:Default.isl"' in languages


def test_sections_are_in_fixed_order(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Emit every section once and in order."""

    text = _builder(descriptor, tmp_path, app_dir).build().text
    positions = [text.index(f"\n{header}\n") for header in SECTION_ORDER]
    assert positions == sorted(positions)
    assert '[InstallDelete]\nType: filesandordirs; Name: "{app}\\*"' in text


def test_files_section_renames_declared_executable(descriptor, tmp_path: Path, app_dir: Path, caplog) -> None:
    """Rename the upstream executable and include other entries verbatim."""

    builder = _builder(descriptor, tmp_path, app_dir)
    with caplog.at_level(logging.INFO):
        text = builder.build().text
    files = _section(text, "[Files]")
    data_dir = (app_dir / "data").absolute()
    assert files == [
        f'Source: "{data_dir}\\*"; DestDir: "{{app}}\\data"; Flags: ignoreversion recursesubdirs createallsubdirs',
        f'Source: "{(app_dir / "demo_app.exe").absolute()}"; DestDir: "{{app}}"; DestName: "Demo App.exe"; Flags: ignoreversion',
        f'Source: "{(app_dir / "flutter_windows.dll").absolute()}"; DestDir: "{{app}}"; Flags: ignoreversion',
    ]
    assert "Renamed demo_app.exe to Demo App.exe" in caplog.text


def test_files_section_without_rename(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Keep the executable name when it matches the display name."""

    (app_dir / "demo_app.exe").rename(app_dir / "Demo App.exe")
    descriptor = copy.deepcopy(descriptor)
    descriptor["name"] = "Demo App"
    text = _builder(descriptor, tmp_path, app_dir).build().text
    assert "DestName:" not in text


def test_redistributables_are_staged_and_listed(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Copy found runtime libraries and append them to the files section."""

    system_dir = tmp_path / "System32"
    system_dir.mkdir()
    (system_dir / "msvcp140.dll").write_bytes(b"dll")
    builder = _builder(descriptor, tmp_path, app_dir)
    files = _section(builder.build().text, "[Files]")
    staged = builder.staging_dir / "Debug" / "msvcp140.dll"
    assert staged.read_bytes() == b"dll"
    assert files[-1] == f'Source: "{staged}"; DestDir: "{{app}}"; Flags: ignoreversion'


def test_default_icon_is_persisted(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Write the bundled icon when none is configured."""

    builder = _builder(descriptor, tmp_path, app_dir)
    setup = _section(builder.build().text, "[Setup]")
    icon_path = builder.staging_dir / "installer.ico"
    assert icon_path.is_file()
    assert f"SetupIconFile={icon_path}" in setup


def test_configured_icon_and_license_are_used(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Reference configured icon and license files directly."""

    project_dir = tmp_path / "project"
    (project_dir / "app.ico").write_bytes(b"\x00\x00\x01\x00")
    (project_dir / "LICENSE").write_text("MIT", encoding="utf-8")
    builder = _builder(descriptor, tmp_path, app_dir, installer_icon="app.ico")
    setup = _section(builder.build().text, "[Setup]")
    assert f"SetupIconFile={(project_dir / 'app.ico').resolve()}" in setup
    assert f"LicenseFile={(project_dir / 'LICENSE').resolve()}" in setup
    assert not (builder.staging_dir / "installer.ico").exists()


@pytest.mark.parametrize(
    ("admin", "required", "override"),
    [
        (False, "PrivilegesRequired=lowest", False),
        (True, "PrivilegesRequired=admin", False),
        ("auto", "PrivilegesRequired=admin", True),
    ],
)
def test_privilege_directives(descriptor, tmp_path: Path, app_dir: Path, admin, required, override) -> None:
    """Map privilege modes to setup directives."""

    setup = _section(_builder(descriptor, tmp_path, app_dir, admin=admin).build().text, "[Setup]")
    assert required in setup
    has_override = "PrivilegesRequiredOverridesAllowed=dialog commandline" in setup
    assert has_override is override
    assert not any(
        line.startswith("PrivilegesRequiredOverridesAllowed=") and "dialog" not in line for line in setup
    )


def test_sign_tool_directives(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Emit sign tool directives only when configured."""

    builder = _builder(
        descriptor,
        tmp_path,
        app_dir,
        sign_tool={"name": "Corp", "command": "signtool.exe sign $f", "params": "$f", "retry_count": 3},
    )
    artifact = builder.build()
    setup = _section(artifact.text, "[Setup]")
    assert setup[-3:] == ["SignTool=Corp $f", "SignToolRetryCount=3", "SignToolRetryDelay=500"]
    command = compiler_command(builder.config, artifact.path)
    assert command == ["ISCC", "/SCorp=signtool.exe sign $f", str(artifact.path)]


def test_languages_section(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """List one entry per configured language."""

    text = _builder(descriptor, tmp_path, app_dir, languages=["english", "german"]).build().text
    assert _section(text, "[Languages]") == [
        'Name: "english"; MessagesFile: "compiler:Default.isl"',
        'Name: "german"; MessagesFile: "compiler:Languages\\German.isl"',
    ]


def test_tasks_and_icons_sections(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Point shortcuts at the renamed executable."""

    text = _builder(descriptor, tmp_path, app_dir).build().text
    assert _section(text, "[Tasks]") == [
        'Name: "desktopicon"; Description: "{cm:CreateDesktopIcon}"; GroupDescription: "{cm:AdditionalIcons}"'
    ]
    assert _section(text, "[Icons]") == [
        'Name: "{autoprograms}\\Demo App"; Filename: "{app}\\Demo App.exe"',
        'Name: "{autodesktop}\\Demo App"; Filename: "{app}\\Demo App.exe"; Tasks: desktopicon',
    ]


def test_run_section_without_arguments_is_empty(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Emit only the header when no run arguments are configured."""

    text = _builder(descriptor, tmp_path, app_dir).build().text
    assert _section(text, "[Run]") == []


def test_run_section_normal_and_silent(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Gate the normal launch on interactive installs and the silent one on silent installs."""

    text = _builder(
        descriptor,
        tmp_path,
        app_dir,
        name="Tom & Jerry",
        run_args=["--welcome"],
        run_if_silent_mode=True,
        run_silent_args=["--background", "--quiet"],
    ).build().text
    run = _section(text, "[Run]")
    assert run == [
        'Filename: "{app}\\Tom & Jerry.exe"; Parameters: "--welcome"; '
        'Description: "{cm:LaunchProgram,Tom && Jerry}"; '
        "Flags: nowait postinstall skipifsilent; Check: not IsSilentInstall",
        'Filename: "{app}\\Tom & Jerry.exe"; Parameters: "--background --quiet"; '
        'Description: "{cm:LaunchProgram,Tom && Jerry}"; '
        "Flags: nowait postinstall; Check: IsSilentInstall",
    ]


def test_run_arguments_with_spaces_stay_whole(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Quote run arguments that contain whitespace."""

    text = _builder(descriptor, tmp_path, app_dir, run_args=["--open", "My File.txt"]).build().text
    run = _section(text, "[Run]")
    assert len(run) == 1
    assert 'Parameters: "--open ""My File.txt""";' in run[0]


def test_silent_run_requires_flag(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Skip the silent launch line unless run_if_silent_mode is set."""

    text = _builder(descriptor, tmp_path, app_dir, run_args=[], run_silent_args=["--quiet"]).build().text
    run = _section(text, "[Run]")
    assert len(run) == 1
    assert "Parameters" not in run[0]
    assert "skipifsilent" in run[0]


def test_code_section_appendix(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Define IsSilentInstall and append custom code."""

    appendix = "procedure Custom();\nbegin\nend;"
    text = _builder(descriptor, tmp_path, app_dir, append_section_code=appendix).build().text
    code = text[text.index("[Code]"):]
    assert "function IsSilentInstall(): Boolean;" in code
    assert code.rstrip().endswith(appendix)


def test_output_path_follows_build_variant(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Write release scripts under the Release directory."""

    builder = _builder(descriptor, tmp_path, app_dir, BuildOverrides(build_type=BuildType.RELEASE))
    artifact = builder.build()
    assert artifact.path.parent.name == "Release"
    assert f"OutputDir={artifact.path.parent}" in artifact.text


def test_build_is_idempotent(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Produce byte-identical scripts for identical inputs."""

    builder = _builder(descriptor, tmp_path, app_dir)
    first = builder.build()
    second = builder.build()
    assert first.text == second.text
    assert first.path.read_bytes() == second.text.encode("utf-8")


def test_missing_app_dir_is_fatal(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Abort when the build output directory does not exist."""

    builder = _builder(descriptor, tmp_path, tmp_path / "nowhere")
    with pytest.raises(ScriptSynthesisError, match="does not exist"):
        builder.build()
    assert not builder.script_path.exists()


def test_write_failure_is_fatal(descriptor, tmp_path: Path, app_dir: Path) -> None:
    """Wrap file system errors raised while writing the script."""

    builder = _builder(descriptor, tmp_path, app_dir)
    builder.output_dir.parent.mkdir(parents=True)
    builder.output_dir.write_text("not a directory", encoding="utf-8")
    with pytest.raises(ScriptSynthesisError, match="Failed to generate"):
        builder.build()


def test_escape_constant_argument() -> None:
    """Escape ampersands and constant separators."""

    assert escape_constant_argument("A & B") == "A && B"
    assert escape_constant_argument("A,B}|%") == "A%2cB%7d%7c%25"
