"""Command-line entry point for generating installer scripts."""

from __future__ import annotations

import argparse
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from innoBundler.config import BuildOverrides, Configuration, load_config
from innoBundler.constants import APP_BUILD_DIR, CONFIG_SECTION, DEFAULT_DESCRIPTOR
from innoBundler.errors import ConfigurationError, InnoBundlerError
from innoBundler.options import BuildType
from innoBundler.script_builder import ScriptArtifact, ScriptBuilder, compiler_command
from innoBundler.utils import configure_logging, load_yaml_config


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        ArgumentParser instance.
    """

    parser = argparse.ArgumentParser(description="Generate Inno Setup installer scripts")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("guid", help="Print a new application id for inno_bundle.id.")

    build = subparsers.add_parser("build", help="Generate the installer script.")
    build.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_DESCRIPTOR,
        help="Path to the project descriptor.",
    )
    variant = build.add_mutually_exclusive_group()
    variant.add_argument(
        "--release",
        dest="build_type",
        action="store_const",
        const=BuildType.RELEASE.value,
        help="Use the release build output.",
    )
    variant.add_argument(
        "--profile",
        dest="build_type",
        action="store_const",
        const=BuildType.PROFILE.value,
        help="Use the profile build output.",
    )
    variant.add_argument(
        "--debug",
        dest="build_type",
        action="store_const",
        const=BuildType.DEBUG.value,
        help="Use the debug build output.",
    )
    build.set_defaults(build_type=BuildType.DEBUG.value)
    build.add_argument(
        "--app-dir",
        type=Path,
        default=None,
        help="Directory holding the application build output.",
    )
    build.add_argument(
        "--no-app", dest="app", action="store_false", help="Skip building the application."
    )
    build.add_argument(
        "--no-installer",
        dest="installer",
        action="store_false",
        help="Skip generating the installer script.",
    )
    build.add_argument("--build-args", default=None, help="Arguments passed to the app build.")
    build.add_argument("--app-version", default=None, help="Override the application version.")
    build.add_argument("--sign-tool-name", default=None, help="Override the sign tool name.")
    build.add_argument("--sign-tool-command", default=None, help="Override the sign tool command.")
    build.add_argument("--sign-tool-params", default=None, help="Override the sign tool parameters.")
    build.add_argument(
        "--envs",
        action="store_true",
        help="Print the resolved configuration as environment variables and exit.",
    )
    build.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def overrides_from_args(args: argparse.Namespace) -> BuildOverrides:
    """Translate parsed arguments into resolver overrides.

    Parameters:
        args: Parsed ``build`` arguments.

    Returns:
        BuildOverrides instance.
    """

    build_type = BuildType.parse(args.build_type)
    if not build_type.is_valid():
        raise ConfigurationError(build_type.error)
    return BuildOverrides(
        build_type=build_type.value,
        app=args.app,
        installer=args.installer,
        build_args=args.build_args,
        app_version=args.app_version,
        sign_tool_name=args.sign_tool_name,
        sign_tool_command=args.sign_tool_command,
        sign_tool_params=args.sign_tool_params,
    )


def default_app_dir(config: Configuration, project_dir: Path) -> Path:
    """Return the conventional application build output directory.

    Parameters:
        config: Resolved configuration.
        project_dir: Project root directory.

    Returns:
        Directory for the configured build variant.
    """

    return Path(project_dir).joinpath(*APP_BUILD_DIR, config.build_type.dir_name)


def _read_log_config(descriptor_path: Path) -> Optional[Dict[str, Any]]:
    """Return the optional ``inno_bundle.logging`` block.

    Parameters:
        descriptor_path: Path to the project descriptor.

    Returns:
        Logging configuration dictionary, or None.
    """

    # Unreadable descriptors are reported by load_config once logging is set up.
    try:
        descriptor = load_yaml_config(descriptor_path)
    except (OSError, yaml.YAMLError):
        return None
    section = descriptor.get(CONFIG_SECTION) if isinstance(descriptor, dict) else None
    if isinstance(section, dict) and isinstance(section.get("logging"), dict):
        return section["logging"]
    return None


def run_build(args: argparse.Namespace, logger: logging.Logger) -> Optional[ScriptArtifact]:
    """Resolve the descriptor and generate the script.

    Parameters:
        args: Parsed ``build`` arguments.
        logger: Logger instance.

    Returns:
        ScriptArtifact, or None when no script was requested.
    """

    project_dir = args.config.resolve().parent
    config = load_config(args.config, overrides_from_args(args), project_dir)
    if args.envs:
        print(config.to_environment_variables())
        return None
    if not config.installer:
        logger.info("Installer step disabled; no script generated.")
        return None
    app_dir = args.app_dir or default_app_dir(config, project_dir)
    if not config.app:
        logger.info("Application build skipped; using existing output in %s", app_dir)
    artifact = ScriptBuilder(config, app_dir, project_dir=project_dir, logger=logger).build()
    logger.info("Compile with: %s", " ".join(compiler_command(config, artifact.path)))
    return artifact


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Run the CLI.

    Parameters:
        argv: Command-line arguments (defaults to ``sys.argv``).
    """

    args = build_arg_parser().parse_args(argv)
    if args.command == "guid":
        print(uuid.uuid4())
        return

    configure_logging(args.verbose, _read_log_config(args.config))
    logger = logging.getLogger(__name__)
    try:
        run_build(args, logger)
    except InnoBundlerError as exc:
        logger.error("%s", exc)
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
