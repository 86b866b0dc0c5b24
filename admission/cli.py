#!/usr/bin/env python3

from __future__ import annotations
import json
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from admission.core.ClockValidator import MAX_CLOCK_DRIFT_MS
from admission.core.MessageKinds import REQUIRED_FIELDS, TRANSPORT_CLOCKED_KINDS
from admission.core.Messages import MalformedMessageError, message_from_dict
from admission.gate import AdmissionGate
from shared.config import ConfigError, load_config
from shared.log import configure_root_logging, get_logger

app = typer.Typer(help="Inbound message admission checks")
console = Console()
logger = get_logger(__name__)

EXIT_REJECTED = 1
EXIT_MALFORMED = 2


def _load_messages(path: Path) -> List[Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise MalformedMessageError(f"Cannot read {path}: {e}") from e
    items = data if isinstance(data, list) else [data]
    return [message_from_dict(item) for item in items]


@app.command()
def check(
    file: Path = typer.Argument(..., help="JSON file with one message object or a list of them"),
    reference_ms: Optional[int] = typer.Option(
        None, "--reference-ms", help="Transport receipt time in epoch ms; now if omitted"
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
):
    """Run messages through the admission gate and print the verdicts."""
    try:
        config = load_config(config_path)
        configure_root_logging(config.log_level, config.log_dir)
        messages = _load_messages(file)
    except (ConfigError, MalformedMessageError) as e:
        console.print(f"[bold red]error:[/] {escape(str(e))}")
        raise typer.Exit(code=EXIT_MALFORMED)

    gate = AdmissionGate(config)
    results = gate.check_batch(messages, reference_ms)

    table = Table(title=f"{file.name}: {len(results)} message(s)")
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Verdict")
    table.add_column("Reason")
    table.add_column("Detail")
    for index, (message, error) in enumerate(results):
        if error is None:
            table.add_row(str(index), type(message).KIND.value, "[green]accept[/]", "", "")
        else:
            table.add_row(str(index), type(message).KIND.value, "[red]reject[/]", error.kind.value, error.detail)
    console.print(table)

    rejected = sum(1 for _, error in results if error is not None)
    logger.info("Checked %d message(s), %d rejected", len(results), rejected)
    if rejected:
        raise typer.Exit(code=EXIT_REJECTED)


@app.command()
def kinds():
    """List message kinds, their required fields and clock rule."""
    table = Table(title=f"Message kinds (max clock drift {MAX_CLOCK_DRIFT_MS} ms)")
    table.add_column("Kind")
    table.add_column("Required fields")
    table.add_column("Clock check")
    for kind, fields in REQUIRED_FIELDS.items():
        rule = "symmetric" if kind in TRANSPORT_CLOCKED_KINDS else "future only"
        table.add_row(kind.value, ", ".join(fields), rule)
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
