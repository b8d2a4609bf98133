"""Generate an installer script for a simulated application build."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from innoBundler.cli import default_app_dir
from innoBundler.config import BuildOverrides, resolve_config
from innoBundler.options import BuildType
from innoBundler.script_builder import ScriptBuilder
from innoBundler.utils import configure_logging, load_yaml_config


def create_simulated_build(app_dir: Path, exe_name: str, logger: logging.Logger) -> None:
    """Create a small fake application build output.

    Parameters:
        app_dir: Directory receiving the fake build output.
        exe_name: Executable file name produced by the build.
        logger: Logger instance.
    """

    (app_dir / "data" / "flutter_assets").mkdir(parents=True, exist_ok=True)
    (app_dir / "data" / "icudtl.dat").write_bytes(b"\x00" * 16)
    (app_dir / "data" / "flutter_assets" / "AssetManifest.json").write_text("{}", encoding="utf-8")
    (app_dir / exe_name).write_bytes(b"MZ")
    (app_dir / "flutter_windows.dll").write_bytes(b"MZ")
    logger.debug("Created simulated build output at %s", app_dir)


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Returns:
        ArgumentParser instance.
    """

    parser = argparse.ArgumentParser(description="Run the installer script demo.")
    parser.add_argument(
        "--config",
        type=Path,
        default=REPO_ROOT / "configs" / "demo_pubspec.yml",
        help="Path to the demo project descriptor.",
    )
    parser.add_argument(
        "--output-root",
        type=Path,
        default=REPO_ROOT / "tmp" / "demo_project",
        help="Directory used as the demo project root.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    return parser


def main() -> None:
    """Generate the demo script and print it."""

    args = build_arg_parser().parse_args()
    descriptor: Dict = load_yaml_config(args.config)
    configure_logging(args.debug, descriptor.get("inno_bundle", {}).get("logging"))
    logger = logging.getLogger(__name__)
    project_dir = args.output_root.resolve()
    config = resolve_config(
        descriptor,
        BuildOverrides(build_type=BuildType.RELEASE),
        project_dir=project_dir,
    )
    app_dir = default_app_dir(config, project_dir)
    create_simulated_build(app_dir, config.declared_exe_name, logger)
    artifact = ScriptBuilder(
        config,
        app_dir,
        project_dir=project_dir,
        temp_dir=project_dir / "staging",
        logger=logger,
    ).build()
    print(artifact.text)


if __name__ == "__main__":
    main()
