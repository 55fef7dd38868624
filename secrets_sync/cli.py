"""
CLI entrypoint for secrets-sync output-safety tooling.

Commands: scrub, classify, patterns, doctor.
The sync engine mounts its own commands on ``app``.
"""
import io
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, TextIO

import typer

from secrets_sync.bootstrap import get_output_guard
from secrets_sync.config.config import find_env_config, load_settings
from secrets_sync.monitoring.logger import get_logger, setup_logging
from secrets_sync.security.classifier import SECRET_KEYS, SECRET_SUBSTRINGS, WHITELIST_KEYS
from secrets_sync.security.patterns import MAX_INPUT_LENGTH
from secrets_sync.utils.dependencies import DEFAULT_CHECKS, to_dependency_error, validate_dependencies
from secrets_sync.utils.error_messages import format_dependency_error
from secrets_sync.utils.safe_fs import safe_read_file

app = typer.Typer(
    name="secrets-sync",
    help="Secrets sync output-safety tools",
    add_completion=False,
    # Tracebacks with locals would print secret values
    pretty_exceptions_show_locals=False,
)

logger = get_logger(__name__)

PEM_BEGIN = "-----BEGIN "
PEM_END = "-----END "


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG/INFO/WARNING/ERROR"),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="json or text"),
):
    """Configure logging for every command."""
    settings = load_settings()
    setup_logging(
        (log_level or settings.log_level).upper(),
        log_format or settings.log_format,
        scrubber=get_output_guard(),
    )


def iter_blocks(lines: Iterable[str]) -> Iterator[str]:
    """
    Group lines into blank-line separated blocks.

    Redacting block by block catches multi-line secrets without buffering
    the whole input. A key block (``-----BEGIN ...`` to ``-----END ...``)
    always starts a new block and is never split, not even at a blank line
    or the input ceiling; an oversized key block is therefore replaced by
    the too-large placeholder rather than printed in pieces. Outside key
    blocks, a block that would exceed the ceiling is split at line
    boundaries.
    """
    block: List[str] = []
    size = 0
    in_key = False
    for line in lines:
        begin = line.find(PEM_BEGIN)
        if not in_key and begin != -1:
            if block:
                yield "".join(block)
                block, size = [], 0
            in_key = PEM_END not in line[begin:]
        elif in_key:
            in_key = PEM_END not in line
        elif size + len(line) > MAX_INPUT_LENGTH and block:
            yield "".join(block)
            block, size = [], 0

        block.append(line)
        size += len(line)
        if not in_key and not line.strip():
            yield "".join(block)
            block, size = [], 0
    if block:
        yield "".join(block)


def _scrub_stream(stream: TextIO) -> int:
    guard = get_output_guard()
    count = 0
    for block in iter_blocks(stream):
        typer.echo(guard.redact_text(block), nl=False)
        count += 1
    return count


@app.command()
def scrub(
    file: Optional[Path] = typer.Argument(None, help="File to scrub (default: stdin)"),
):
    """
    Print FILE (or stdin) with secret-shaped values redacted.

    Example:
        cat .env.production | secrets-sync scrub
    """
    if file is None:
        stream = typer.get_text_stream("stdin")
        blocks = _scrub_stream(stream)
    else:
        if not file.is_file():
            typer.echo(f"Not a file: {file}", err=True)
            raise typer.Exit(code=1)
        # PermissionDeniedError propagates to the entry point, which prints the fix
        text = safe_read_file(file, errors="replace")
        blocks = _scrub_stream(io.StringIO(text))
    logger.debug("Scrubbed input", blocks=blocks)


@app.command()
def classify(
    names: List[str] = typer.Argument(..., help="Key names to classify"),
):
    """
    Show how each key name is classified (secret / whitelisted / unclassified).

    Example:
        secrets-sync classify API_KEY PORT MY_VALUE
    """
    redactor = get_output_guard().redactor
    for name in names:
        typer.echo(f"{name}: {redactor.classify_key(name).value}")


@app.command()
def patterns():
    """List built-in key names and user glob patterns in effect."""
    classifier = get_output_guard().redactor.classifier
    config_path = find_env_config()

    typer.echo("Secret keys:")
    for key in sorted(SECRET_KEYS):
        typer.echo(f"  {key}")
    typer.echo(f"Secret substrings: {', '.join(SECRET_SUBSTRINGS)}")
    typer.echo("Whitelisted keys:")
    for key in sorted(WHITELIST_KEYS):
        typer.echo(f"  {key}")

    typer.echo(f"User config: {config_path if config_path else '(none)'}")
    typer.echo(f"  scrub patterns: {', '.join(classifier.scrub_patterns) or '(none)'}")
    typer.echo(f"  whitelist patterns: {', '.join(classifier.whitelist_patterns) or '(none)'}")


@app.command()
def doctor():
    """
    Check that the tools secrets-sync relies on are installed and ready.

    Example:
        secrets-sync doctor
    """
    result = validate_dependencies(DEFAULT_CHECKS)
    failed = {check.name for check in result.failures}
    for check in DEFAULT_CHECKS:
        if check.name not in failed:
            typer.echo(f"✓ {check.name}")
    for check in result.failures:
        typer.echo(format_dependency_error(to_dependency_error(check), get_output_guard()), err=True)
    if not result.success:
        raise typer.Exit(code=1)
