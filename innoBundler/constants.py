"""Fixed values shared by the resolver and the script builder."""

from __future__ import annotations

import re
from pathlib import Path

CONFIG_SECTION = "inno_bundle"
DEFAULT_DESCRIPTOR = Path("pubspec.yaml")
DEFAULT_LICENSE_FILE = "LICENSE"
DEFAULT_SIGN_TOOL_NAME = "InnoBundleTool"
DEFAULT_SIGN_TOOL_RETRY_COUNT = 2
DEFAULT_SIGN_TOOL_RETRY_DELAY = 500

# Placeholder resolved to a persisted icon when the script is built.
DEFAULT_INSTALLER_ICON = "__default_installer_icon__"
DEFAULT_INSTALLER_ICON_FILE_NAME = "installer.ico"

INSTALLER_BUILD_DIR = ("build", "windows", "x64", "installer")
APP_BUILD_DIR = ("build", "windows", "x64", "runner")
SCRIPT_FILE_NAME = "inno-script.iss"

# Visual C++ runtime DLLs bundled so end users need no separate redistributable.
REDISTRIBUTABLE_DLLS = ("msvcp140.dll", "vcruntime140.dll", "vcruntime140_1.dll")
SYSTEM_LIBRARY_DIRS = (Path("C:/Windows/System32"),)

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
VALID_FILENAME_PATTERN = re.compile(r'^[^<>:"/\\|?*\x00-\x1f]*[^<>:"/\\|?*\x00-\x1f. ]$')

SCRIPT_HEADER = """\
; Inno Setup script generated by innoBundler.
; Changes made here are overwritten on the next build.

"""
