"""
CLI interface for teavm-task.

Provides commands: compile, classpath, sources.
"""

import os
import sys
from pathlib import Path

import click

from teavm_task import __version__
from teavm_task.classpath import classpath_urls
from teavm_task.config import load_config
from teavm_task.errors import TeaVMTaskError
from teavm_task.sources import resolve_source_providers
from teavm_task.task import TeaVMTask
from teavm_task.tools.teavm import TeaVMCliTool
from teavm_task.utils import (
    format_duration,
    print_banner,
    print_error,
    print_success,
    print_warning,
    setup_logging,
)

CLI_JAR_ENV_VAR = "TEAVM_CLI_JAR"


@click.group()
@click.version_option(version=__version__, prog_name="teavm-task")
def main():
    """
    teavm-task - Compile a project to JavaScript with TeaVM.
    """
    pass


config_option = click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Custom configuration file (default: ./teavm.yaml)",
)


@main.command()
@config_option
@click.option(
    "--main-class",
    help="Entry point class (overrides teavm.main_class_name)",
)
@click.option(
    "--cli-jar",
    type=click.Path(path_type=Path),
    envvar=CLI_JAR_ENV_VAR,
    required=True,
    help="TeaVM CLI jar (or set $TEAVM_CLI_JAR)",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
def compile(config, main_class, cli_jar, verbose):
    """
    Compile the configured main class.

    Examples:

      # Compile with ./teavm.yaml
      teavm-task compile --cli-jar teavm-cli.jar

      # Override the entry point
      teavm-task compile --main-class com.example.Main
    """
    try:
        task_config = load_config(config)

        logger = setup_logging(
            log_level="DEBUG" if verbose else task_config.get_log_level(),
            log_format=task_config.get_log_format(),
            console_output=task_config.should_log_to_console(),
            log_file=task_config.get_log_file_path(),
        )

        if main_class:
            task_config.settings.main_class_name = main_class

        tool = TeaVMCliTool(cli_jar, logger=logger)
        validation = tool.validate()
        if not validation["valid"]:
            for error in validation["errors"]:
                print_error(error)
            sys.exit(1)
        for warning in validation.get("warnings", []):
            print_warning(warning)

        print_banner("TeaVM")
        task = TeaVMTask(task_config.settings, task_config.project, tool)
        result = task.run()

        if tool.problem_provider.severe_problems or not result.target_file.exists():
            print_warning(f"TeaVM reported errors; {result.target_file} may be incomplete")
        else:
            print_success(
                f"Wrote {result.target_file} in {format_duration(result.duration_seconds)}"
            )
        sys.exit(0)

    except Exception as e:
        print_error(f"TeaVM compilation failed: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


@main.command()
@config_option
def classpath(config):
    """Show the runtime classpath handed to the compiler."""
    try:
        task_config = load_config(config)
        urls = classpath_urls(
            task_config.project.runtime_classpath,
            task_config.project.artifacts,
        )
    except TeaVMTaskError as e:
        print_error(str(e))
        sys.exit(1)

    for url in urls:
        click.echo(url)


@main.command()
@config_option
def sources(config):
    """Show the source providers in the order TeaVM reads them."""
    try:
        task_config = load_config(config)
    except TeaVMTaskError as e:
        print_error(str(e))
        sys.exit(1)

    project = task_config.project
    for provider in resolve_source_providers(project.source_dirs, project.teavm_sources):
        click.echo(f"{provider.kind}\t{os.fspath(provider.path)}")


if __name__ == "__main__":
    main()
