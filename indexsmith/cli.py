"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of IndexSmith, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Command line interface for IndexSmith.

The ``analyze`` command reflects an existing database, runs the heuristic
engine over every table and reports which indexes would be created. The
database itself is never modified.
"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from indexsmith import __version__
from indexsmith.core.config import AutoIndexConfig, LoggingConfig
from indexsmith.core.logging import get_logger, log_operation
from indexsmith.conventions import AutoIndexConvention
from indexsmith.exceptions import IndexSmithError
from indexsmith.heuristic_rules import (
    COMPOSITE_BONUS_POINTS,
    ENUM_STATE_POINTS,
    EXCLUSION_PENALTY,
    FOREIGN_KEY_POINTS,
    SOFT_DELETE_POINTS,
    TENANT_ID_POINTS,
    get_default_rules,
)
from indexsmith.schema_reflection import reflect_database

logger = get_logger("indexsmith.cli")

app = typer.Typer(help="IndexSmith heuristic index advisor")
console = Console()

RULE_POINTS = {
    "Exclusion": (EXCLUSION_PENALTY, "Audit columns, unbounded or over-long strings"),
    "ForeignKey": (FOREIGN_KEY_POINTS, "Property belongs to a foreign key"),
    "TenantId": (TENANT_ID_POINTS, f"Tenant identifier; with a soft delete column adds a composite (+{COMPOSITE_BONUS_POINTS} bonus)"),
    "SoftDelete": (SOFT_DELETE_POINTS, "Soft delete indicator"),
    "EnumState": (ENUM_STATE_POINTS, "Enum type or name ending in Status/State/Type"),
}


def get_database_url(database_url: str | None, db_path: Path | None) -> str:
    """
    Resolve the database URL from the command line options.

    Args:
        database_url: SQLAlchemy URL, used as given
        db_path: Path to an SQLite database file

    Returns:
        A SQLAlchemy connection URL

    """
    if database_url:
        return database_url
    if db_path:
        if not db_path.exists():
            console.print(f"Error: database file does not exist: {db_path}", style="red")
            raise typer.Exit(code=1)
        return f"sqlite:///{db_path}"

    console.print("Error: provide --database-url or --db-path", style="red")
    raise typer.Exit(code=1)


@app.command("analyze")
def analyze(
    database_url: str | None = typer.Option(
        None, help="SQLAlchemy database URL",
    ),
    db_path: Path | None = typer.Option(
        None, help="Path to SQLite database file",
    ),
    threshold: int | None = typer.Option(
        None, help="Score threshold for heuristic indexes (default from INDEXSMITH_SCORE_THRESHOLD or 50)",
    ),
    diagnostics: bool = typer.Option(
        False, "--diagnostics", help="Log every index decision with its score breakdown",
    ),
    show_skipped: bool = typer.Option(
        False, "--show-skipped", help="Include skipped candidates in the decisions table",
    ),
    output_file: Path | None = typer.Option(
        None, help="Output file path for the decision report (JSON)",
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug logging",
    ),
):
    """
    Reflect a database and report the indexes IndexSmith would create.
    """
    LoggingConfig.from_env().configure_logging(debug=debug)

    overrides = {}
    if threshold is not None:
        overrides["score_threshold"] = threshold
    if diagnostics:
        overrides["enable_diagnostics"] = True
    config = AutoIndexConfig.from_env(**overrides)

    url = get_database_url(database_url, db_path)

    try:
        with log_operation(logger, "index analysis", context={"threshold": config.score_threshold}):
            metadata, entities = reflect_database(url)
            convention = AutoIndexConvention(config)
            recorder = convention.apply(metadata)
    except IndexSmithError as e:
        console.print(f"Error analyzing database: {e}", style="red")
        raise typer.Exit(code=1)

    console.print("\n[bold]Index Analysis Summary[/bold]")

    summary = Table(title="Summary")
    summary.add_column("Metric")
    summary.add_column("Value")
    summary.add_row("Tables", str(len(entities)))
    summary.add_row("Score Threshold", str(config.score_threshold))
    summary.add_row("Indexes To Create", str(len(recorder.created)))
    summary.add_row("Candidates Skipped", str(len(recorder.skipped)))
    console.print(summary)

    decisions = recorder.decisions if show_skipped else tuple(recorder.created)
    if decisions:
        decision_table = Table(title="Index Decisions")
        decision_table.add_column("Index Name")
        decision_table.add_column("Table")
        decision_table.add_column("Columns")
        decision_table.add_column("Score")
        decision_table.add_column("Source")
        decision_table.add_column("Status")
        decision_table.add_column("Reason")

        for decision in decisions:
            status = "[green]create[/green]" if decision.was_created else "[yellow]skip[/yellow]"
            decision_table.add_row(
                decision.index_name,
                decision.table_name,
                ", ".join(decision.column_names),
                str(decision.score.total_score),
                decision.source.value,
                status,
                decision.reason,
            )

        console.print(decision_table)
    else:
        console.print("No indexes qualify for creation.", style="yellow")

    if convention.error_tracker.has_errors():
        failed = convention.error_tracker.get_error_summary()["total_errors"]
        console.print(f"{failed} table(s) failed analysis; see the log for details", style="red")

    if output_file:
        report = recorder.to_report()
        report["tables"] = [entity.storage_name for entity in entities]
        with open(output_file, "w") as f:
            json.dump(report, f, indent=2, default=str)
        console.print(f"\nDecision report saved to {output_file}", style="green")


@app.command("rules")
def list_rules():
    """
    List the default heuristic rules and their points.
    """
    rules_table = Table(title="Default Heuristic Rules")
    rules_table.add_column("Order")
    rules_table.add_column("Rule")
    rules_table.add_column("Points")
    rules_table.add_column("Fires When")

    for order, rule in enumerate(get_default_rules(), start=1):
        points, description = RULE_POINTS.get(rule.rule_name, (0, ""))
        rules_table.add_row(str(order), rule.rule_name, f"{points:+d}", description)

    console.print(rules_table)


@app.command("version")
def version():
    """
    Show the IndexSmith version.
    """
    console.print(f"IndexSmith {__version__}")


if __name__ == "__main__":
    app()
