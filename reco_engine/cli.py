"""
reco-engine — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Load the people graph and assemble the engine.
  4. Execute the action (recommend, precompute, schedule, DB init,
     cache inspection).
  5. Report the result to stdout.

Install and run::

    pip install -e .
    reco-engine --help
    reco-engine validate-config
    reco-engine init-db
    reco-engine recommend Vince --limit 2
    reco-engine precompute
    reco-engine recommend Vince --mode precomputed
    reco-engine inspect-cache --evict Vince
    reco-engine start-scheduler
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="reco-engine",
    help="Pluggable recommendation engine — real-time and precomputed rankings.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from reco_engine.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from reco_engine.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_graph_or_exit(config, graph_path: Optional[str]):
    """Load the people graph named by ``--graph`` or ``[data] graph_file``."""
    from reco_engine.graph.people import PeopleGraph

    path = Path(graph_path or config.data.graph_file)
    try:
        return PeopleGraph.from_json(path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (KeyError, ValueError) as exc:
        typer.echo(f"[ERROR] Invalid people graph {path}: {exc}", err=True)
        raise typer.Exit(code=1)


def _build_engine(config, graph, reporter=None):
    """Friend-recommendation engine with the configured cache store."""
    from reco_engine.cache.factory import build_cache_store
    from reco_engine.friends.engine import build_friends_engine

    cache = build_cache_store(config, resolver=graph.get)
    try:
        return build_friends_engine(graph, config, cache=cache, reporter=reporter)
    except KeyError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _build_precompute_module(config, engine, graph):
    from reco_engine.precompute.module import PrecomputeModule

    return PrecomputeModule(
        engine, population=graph.persons, batch_size=config.precompute.batch_size
    )


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Scoring units:    {', '.join(config.engine.units)}")
    typer.echo(f"  Default limit:    {config.engine.default_limit}")
    typer.echo(f"  Parallel:         {config.engine.parallel}")
    typer.echo(f"  Timeout (s):      {config.engine.timeout_seconds}")
    typer.echo(f"  Cache backend:    {config.cache.backend}")
    typer.echo(f"  Cache path:       {config.cache.db_path}")
    typer.echo(f"  Graph file:       {config.data.graph_file}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))


@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override cache DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Initialize the SQLite cache database.

    Safe to run multiple times — all DDL uses IF NOT EXISTS.
    """
    from reco_engine.db.connection import get_connection
    from reco_engine.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.cache.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with get_connection(
        target_path,
        wal_mode=config.cache.wal_mode,
        busy_timeout_ms=config.cache.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("recommend")
def recommend(
    subject: str = typer.Argument(..., help="Name of the person to recommend friends for."),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=0, help="Number of recommendations (default: engine.default_limit)."
    ),
    mode: str = typer.Option(
        "real-time", "--mode", help="Execution mode: real-time | precomputed."
    ),
    graph_path: Optional[str] = typer.Option(None, "--graph", help="People graph JSON file."),
    as_json: bool = typer.Option(False, "--json", help="Print the ranking as JSON."),
    report: bool = typer.Option(
        False, "--report", help="Also write a JSON report under [data] report_dir."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Compute (or serve precomputed) recommendations for one subject."""
    from reco_engine.engine.context import Mode
    from reco_engine.reporting.reporter import (
        LoggingRecommendationLogger,
        format_recommendations,
        ranking_as_dicts,
        write_recommendations_json,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        run_mode = Mode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in Mode)
        typer.echo(f"[ERROR] Unknown mode '{mode}'. Expected one of: {valid}.", err=True)
        raise typer.Exit(code=1)

    graph = _load_graph_or_exit(config, graph_path)
    try:
        person = graph.get(subject)
    except KeyError as exc:
        typer.echo(f"[ERROR] {exc.args[0]}", err=True)
        raise typer.Exit(code=1)

    engine = _build_engine(config, graph, reporter=LoggingRecommendationLogger())
    ranked = engine.recommend(person, mode=run_mode, limit=limit)

    if as_json:
        typer.echo(json.dumps(
            {"subject": person.name, "mode": run_mode.value,
             "recommendations": ranking_as_dicts(ranked)},
            indent=2,
        ))
    else:
        typer.echo(format_recommendations(person, ranked))

    if report:
        path = write_recommendations_json(
            person, ranked, Path(config.data.report_dir), mode=run_mode.value
        )
        typer.echo(f"  Report: {path}")


@app.command("precompute")
def precompute(
    subjects: Optional[list[str]] = typer.Option(
        None, "--subject", "-s", help="Only precompute these people (repeatable)."
    ),
    graph_path: Optional[str] = typer.Option(None, "--graph", help="People graph JSON file."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Precompute and cache recommendations for the population (one full sweep)."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    graph = _load_graph_or_exit(config, graph_path)
    try:
        people = [graph.get(name) for name in subjects] if subjects else None
    except KeyError as exc:
        typer.echo(f"[ERROR] {exc.args[0]}", err=True)
        raise typer.Exit(code=1)

    engine = _build_engine(config, graph)
    module = _build_precompute_module(config, engine, graph)
    result = module.run_all(people)

    typer.echo(f"  Precomputed: {len(result.succeeded)}")
    typer.echo(f"  Failed:      {len(result.failed)}")
    if not result.success:
        typer.echo(
            f"[ERROR] Precompute failed for: {', '.join(str(s) for s in result.failed)}",
            err=True,
        )
        raise typer.Exit(code=1)
    typer.echo("[OK] Precompute complete.")


@app.command("inspect-cache")
def inspect_cache(
    evict: Optional[list[str]] = typer.Option(
        None, "--evict", "-e", help="Drop the cached ranking of these subjects (repeatable)."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """List the subjects with a cached ranking, optionally evicting some first."""
    from reco_engine.cache.sqlite_store import SqliteCacheStore

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if config.cache.backend != "sqlite":
        typer.echo(
            f"[ERROR] Cache backend '{config.cache.backend}' does not persist between runs.",
            err=True,
        )
        raise typer.Exit(code=1)

    store = SqliteCacheStore(
        config.cache.db_path,
        wal_mode=config.cache.wal_mode,
        busy_timeout_ms=config.cache.busy_timeout_ms,
    )
    for subject in evict or []:
        status = "evicted" if store.evict(subject) else "not cached"
        typer.echo(f"  {subject}: {status}")

    keys = store.subject_keys()
    typer.echo(f"Cached subjects ({len(keys)}) in {config.cache.db_path}:")
    for key in keys:
        typer.echo(f"  - {key}")


@app.command("start-scheduler")
def start_scheduler(
    graph_path: Optional[str] = typer.Option(None, "--graph", help="People graph JSON file."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Run background precomputation on a fixed delay until Ctrl-C."""
    from reco_engine.scheduler import PrecomputeScheduler

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    graph = _load_graph_or_exit(config, graph_path)
    engine = _build_engine(config, graph)
    module = _build_precompute_module(config, engine, graph)

    scheduler = PrecomputeScheduler(
        module,
        initial_delay_seconds=config.precompute.initial_delay_seconds,
        delay_seconds=config.precompute.delay_seconds,
    )
    typer.echo(
        f"Scheduler starting: {len(graph)} subject(s), batch of "
        f"{config.precompute.batch_size} every {config.precompute.delay_seconds}s. "
        "Ctrl-C to stop."
    )
    scheduler.run_forever()
    typer.echo(f"[OK] Scheduler stopped after {scheduler.cycles_run} cycle(s).")


if __name__ == "__main__":
    app()
