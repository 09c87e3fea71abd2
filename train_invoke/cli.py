#!/usr/bin/env python3
import logging
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer

from train_invoke.config import check_config_path, load_config
from train_invoke.errors import (
    ConfigError,
    ScriptNotFound,
    SettingsError,
    SpawnFailure,
    SynthesisError,
)
from train_invoke.launch import (
    LogFollower,
    format_command,
    launch,
    pull_latest,
    resolve_entry_point,
    synthesize,
)
from train_invoke.log_setup import setup_logging
from train_invoke.settings import load_settings

EXIT_CONFIG = 3
EXIT_SCRIPT = 4
EXIT_SYNTHESIS = 5
EXIT_SPAWN = 6
EXIT_SETTINGS = 7

app = typer.Typer(add_completion=False)


def _stage(logger: logging.Logger, title: str) -> None:
    logger.info("=" * 25)
    logger.info(title)
    logger.info("=" * 25)


def _fail(logger: logging.Logger, error: Exception, code: int) -> NoReturn:
    logger.debug("Aborting with exit code %d", code, exc_info=error)
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=code)


@app.command()
def invoke(
    script_name: str = typer.Argument(..., help="Training script name, e.g. 'dann'."),
    config_file: Path = typer.Argument(..., help="Path to the run config YAML."),
    root: Optional[Path] = typer.Option(None, "--root", envvar="INVOKE_ROOT", help="Repository root. Default: current directory."),
    python: Optional[str] = typer.Option(None, "--python", envvar="INVOKE_PYTHON", help="Interpreter used to run the script."),
    entry_template: Optional[str] = typer.Option(None, "--entry-template", envvar="INVOKE_ENTRY_TEMPLATE", help="Script path under root, with a '{script}' placeholder."),
    log_dir: Optional[str] = typer.Option(None, "--log-dir", envvar="INVOKE_LOG_DIR", help="Log directory, relative to root."),
    pull: Optional[bool] = typer.Option(None, "--pull/--no-pull", envvar="INVOKE_PULL", help="Run 'git pull --rebase --autostash' first."),
    follow: Optional[bool] = typer.Option(None, "--follow/--no-follow", help="Stream the log. Default: only on a terminal."),
    poll_interval: Optional[float] = typer.Option(None, "--poll-interval", help="Seconds between log polls while following."),
    launcher_log: Optional[Path] = typer.Option(None, "--launcher-log", help="Also write launcher messages to this file. Default: launcher_log from invoke.yaml."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
):
    """Launch a training script in the background with flags built from a YAML config."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = setup_logging(level)

    try:
        settings = load_settings(
            str(root) if root else None,
            {
                "python": python,
                "entry_template": entry_template,
                "log_dir": log_dir,
                "pull": pull,
                "poll_interval": poll_interval,
                "launcher_log": str(launcher_log.resolve()) if launcher_log else None,
            },
        )
    except SettingsError as e:
        _fail(logger, e, EXIT_SETTINGS)
    if settings.launcher_log_path is not None:
        logger = setup_logging(level, str(settings.launcher_log_path))

    # --- Stage 1: Validate inputs ---
    _stage(logger, "STAGE 1: CHECKING INPUTS")
    try:
        config_path = check_config_path(config_file)
    except ConfigError as e:
        _fail(logger, e, EXIT_CONFIG)
    try:
        entry_point = resolve_entry_point(settings, script_name)
    except ScriptNotFound as e:
        _fail(logger, e, EXIT_SCRIPT)
    logger.info("[1.1] Config      : %s", config_path)
    logger.info("[1.2] Entry point : %s", entry_point)

    # --- Stage 2: Update repo (best effort) ---
    if settings.pull:
        _stage(logger, "STAGE 2: UPDATING REPOSITORY")
        pull_latest(settings.root_path)
    else:
        logger.info("[2] Skipping git pull")

    # --- Stage 3: Parse config & build arguments ---
    _stage(logger, "STAGE 3: BUILDING ARGUMENTS")
    try:
        config = load_config(config_path)
    except ConfigError as e:
        _fail(logger, e, EXIT_CONFIG)
    try:
        synthesis = synthesize(config, script_name)
    except SynthesisError as e:
        _fail(logger, e, EXIT_SYNTHESIS)
    logger.info("[3.1] Log path  : %s", synthesis.log_path)
    logger.info("[3.2] Root path : %s", synthesis.root_path)

    # --- Stage 4: Launch ---
    _stage(logger, "STAGE 4: LAUNCHING")
    try:
        record = launch(settings, script_name, config_path, synthesis.args)
    except (ScriptNotFound, SpawnFailure) as e:
        _fail(logger, e, EXIT_SPAWN if isinstance(e, SpawnFailure) else EXIT_SCRIPT)

    typer.echo(f"Starting Training: {format_command(record.command)}")
    typer.echo(f"Check main log at: {record.log_file}")
    typer.echo(f"Process ID: {record.pid}")
    typer.echo("")

    # --- Stage 5: Follow ---
    if follow is None:
        follow = sys.stdout.isatty()
    if not follow:
        typer.echo(f"Check progress with: tail -f {record.log_file}")
        return

    typer.echo("Streaming logs. Press Ctrl-C to stop following (training continues in background).")
    follower = LogFollower(record.log_file, poll_interval=settings.poll_interval)
    returncode = follower.follow(record.process)
    if returncode is None:
        typer.echo(f"\nStopped following. Training continues in background (PID {record.pid}).")
    else:
        typer.echo(f"Process exited (status {returncode}).")


def main():
    app()


if __name__ == "__main__":
    main()
