"""Shared handling of command options."""

from pomodoro_cli.services.config_service import ConfigService
from pomodoro_cli.utils import exit_codes
from pomodoro_cli.utils.ui.formatters import OUTPUT_FORMATS

from .decorators import AppError

OUTPUT_HELP = f"Output format: {', '.join(OUTPUT_FORMATS)} (default: the output.format setting)"


def resolve_output(output: str | None, config_service: ConfigService) -> str:
    """Return ``--output`` if given, else the configured default format."""
    if output is None:
        return config_service.config.output.format
    if output not in OUTPUT_FORMATS:
        raise AppError(
            f"Unknown output format '{output}'. Use one of: {', '.join(OUTPUT_FORMATS)}",
            exit_codes.ERROR_INVALID_ARGS,
        )
    return output
