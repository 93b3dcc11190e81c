"""Command-line interface for llm-bench."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .core.orchestrator import BenchmarkOrchestrator
from .core.schema import FOUR_STAT_METRICS, BenchmarkRecord
from .engine.client import EngineClient
from .settings import BenchSettings
from .storage import build_store
from .utils.errors import LLMBenchError
from .visualizations.charts import METRIC_KINDS, performance_scores
from .visualizations.export import ExcelReportExporter, load_record, to_csv, to_json

console = Console()


def print_record(record: BenchmarkRecord) -> None:
    """Print a benchmark run's configuration and metrics as tables."""
    summary = Table(title=f"Benchmark {record.id}", show_header=False)
    summary.add_column("Field", style="cyan")
    summary.add_column("Value")
    summary.add_row("Model", record.model or "Not specified")
    summary.add_row("URL", record.url)
    summary.add_row("Users / Spawn rate", f"{record.user} / {record.spawnrate}")
    summary.add_row("Duration", f"{record.duration}s")
    summary.add_row("Dataset", record.dataset)
    summary.add_row("Status", record.status)
    summary.add_row("Created", record.created_at.isoformat())
    console.print(summary)

    metrics = record.results.metrics
    table = Table(title="Metrics")
    table.add_column("Metric", style="cyan")
    for label in ("Average", "Median", "Min", "Max"):
        table.add_column(label, justify="right")
    for key in FOUR_STAT_METRICS:
        info = METRIC_KINDS[key]
        stat = getattr(metrics, key)
        table.add_row(
            f"{info.title} ({info.unit})",
            f"{stat.average:.2f}",
            f"{stat.median:.2f}",
            f"{stat.minimum:.2f}",
            f"{stat.maximum:.2f}",
        )
    console.print(table)
    console.print(
        f"Throughput: {metrics.throughput.input_tokens_per_second:.2f} input / "
        f"{metrics.throughput.output_tokens_per_second:.2f} output tokens/s"
    )

    scores = performance_scores(record.results)
    console.print(
        f"Scores: latency [bold]{scores['latency']:.0f}[/bold], "
        f"throughput [bold]{scores['throughput']:.0f}[/bold], "
        f"token speed [bold]{scores['token_speed']:.0f}[/bold]"
    )


async def submit_benchmark(payload: Dict[str, Any], settings: BenchSettings) -> BenchmarkRecord:
    """Run one load test through the orchestrator with the configured store."""
    store = build_store(settings.storage_backend, settings.database_url)
    engine = EngineClient(
        settings.engine_url,
        run_timeout=settings.engine_timeout_seconds,
        history_timeout=settings.history_timeout_seconds,
        run_path=settings.engine_run_path,
    )
    try:
        return await BenchmarkOrchestrator(engine, store).submit(payload)
    finally:
        await engine.aclose()
        store.close()


def export_record(source: Path, fmt: str, output: Optional[Path] = None) -> Path:
    """Convert a saved JSON record into another export format."""
    record = load_record(source)
    output = output or source.with_name(f"benchmark-{record.id}.{fmt}")
    if fmt == "xlsx":
        ExcelReportExporter().create_report(record, output)
    elif fmt == "csv":
        output.write_text(to_csv(record), encoding="utf-8")
    else:
        output.write_text(to_json(record), encoding="utf-8")
    return output


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="llm-bench",
        description="Run LLM load-test benchmarks and manage their results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start the dashboard API
  llm-bench serve --port 8000

  # Run one load test against the benchmark engine
  llm-bench run --url https://my-llm.example.com --user 10 --spawnrate 5 \\
                --duration 30 --model llama-3 --output result.json

  # Convert a saved result to CSV
  llm-bench export result.json --format csv
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Start the REST API server")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    run = subparsers.add_parser("run", help="Submit one load test to the benchmark engine")
    run.add_argument("--url", required=True, help="Target URL of the model under test")
    run.add_argument("--user", type=int, default=100, help="Concurrent users")
    run.add_argument("--spawnrate", type=int, default=100, help="Users spawned per second")
    run.add_argument("--duration", type=int, default=60, help="Test duration in seconds")
    run.add_argument("--model", help="Model name")
    run.add_argument("--tokenizer", help="Tokenizer name")
    run.add_argument("--dataset", default="mteb/banking77", help="Prompt dataset")
    run.add_argument("--notes", help="Free-form notes stored with the run")
    run.add_argument("--engine-url", help="Benchmark engine URL (overrides settings)")
    run.add_argument("--output", help="File to save the record (JSON format)")

    export = subparsers.add_parser("export", help="Convert a saved JSON record")
    export.add_argument("source", help="Record JSON file")
    export.add_argument("--format", choices=["json", "csv", "xlsx"], default="csv", help="Output format")
    export.add_argument("--output", help="Output file")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    load_dotenv()
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "serve":
            from .api.main import run_server

            console.print(f"Starting API on http://{args.host}:{args.port}/api")
            run_server(host=args.host, port=args.port, reload=args.reload)

        elif args.command == "run":
            settings = BenchSettings()
            if args.engine_url:
                settings = settings.model_copy(update={"engine_url": args.engine_url})

            payload = {
                "url": args.url,
                "user": args.user,
                "spawnrate": args.spawnrate,
                "duration": args.duration,
                "model": args.model,
                "tokenizer": args.tokenizer,
                "dataset": args.dataset,
                "notes": args.notes,
            }
            console.print(f"Running load test against {args.url} for {args.duration}s...")
            record = asyncio.run(submit_benchmark(payload, settings))
            print_record(record)

            if args.output:
                output_path = Path(args.output)
                output_path.write_text(to_json(record), encoding="utf-8")
                console.print(f"Record saved to {output_path}")

        elif args.command == "export":
            output = export_record(
                Path(args.source),
                args.format,
                Path(args.output) if args.output else None,
            )
            console.print(f"Exported to {output}")

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(1)
    except LLMBenchError as e:
        console.print(f"[red]{e.message}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
