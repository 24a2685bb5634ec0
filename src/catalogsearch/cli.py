"""CLI entry point for catalogsearch."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from catalogsearch.client.client import AsyncCatalogClient
    from catalogsearch.config.settings import Settings
    from catalogsearch.models.result import SearchResult


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    from catalogsearch.config.settings import Settings
    from catalogsearch.exceptions import CatalogSearchError, DocumentNotFoundError
    from catalogsearch.observability.logging import setup_logging

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()

    # Apply CLI overrides
    if args.log_level:
        settings = settings.model_copy(
            update={"observability": settings.observability.model_copy(update={"log_level": args.log_level})}
        )

    setup_logging(settings.observability)

    try:
        code = asyncio.run(_dispatch(args, settings))
    except DocumentNotFoundError as e:
        print(f"Document '{e.doc_id}' not found", file=sys.stderr)
        code = 1
    except CatalogSearchError as e:
        print(f"Error: {e}", file=sys.stderr)
        code = 1
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="catalogsearch",
        description="catalogsearch — Typed product search over Elasticsearch",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"catalogsearch {_get_version()}",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    seed = commands.add_parser("seed", help="Recreate the index and load generated products")
    seed.add_argument("--count", "-n", type=int, default=None, help="Number of products (overrides config)")
    seed.add_argument("--batch-size", "-b", type=int, default=None, help="Documents per bulk request")
    seed.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    seed.add_argument("--no-recreate", action="store_true", help="Keep the existing index")

    search = commands.add_parser("search", help="Run one search and print the result as JSON")
    kinds = search.add_subparsers(dest="kind", required=True)

    match = kinds.add_parser("match", help="Full-text match on one field")
    match.add_argument("field")
    match.add_argument("text")
    _add_paging(match)

    multi = kinds.add_parser("multi", help="Match text across several fields")
    multi.add_argument("text")
    multi.add_argument("--fields", "-f", required=True, help="Comma-separated field names")
    _add_paging(multi)

    range_ = kinds.add_parser("range", help="Range filter on a numeric or date field")
    range_.add_argument("field")
    for bound in ("gte", "gt", "lte", "lt"):
        range_.add_argument(f"--{bound}", type=_scalar, default=None)

    fuzzy = kinds.add_parser("fuzzy", help="Typo-tolerant term match")
    fuzzy.add_argument("field")
    fuzzy.add_argument("text")
    fuzzy.add_argument("--fuzziness", type=_scalar, default="AUTO")

    phrase = kinds.add_parser("phrase", help="Phrase match with optional slop")
    phrase.add_argument("field")
    phrase.add_argument("phrase")
    phrase.add_argument("--slop", type=int, default=0)

    aggs = kinds.add_parser("aggs", help="Run aggregations given as a JSON object")
    aggs.add_argument("aggregations", type=json.loads)

    get = commands.add_parser("get", help="Fetch one product by id")
    get.add_argument("id")

    delete = commands.add_parser("delete", help="Delete one product by id")
    delete.add_argument("id")

    commands.add_parser("demo", help="Run the example searches")
    return parser


def _add_paging(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--from", dest="from_", type=int, default=None, help="Offset of the first hit")
    parser.add_argument("--size", type=int, default=None, help="Maximum hits to return")


def _scalar(value: str) -> Any:
    """Parse a CLI value as JSON when possible (numbers), else keep the string."""
    try:
        return json.loads(value)
    except ValueError:
        return value


async def _dispatch(args: argparse.Namespace, settings: Settings) -> int:
    from catalogsearch.client.client import AsyncCatalogClient

    if args.command == "seed":
        loader = settings.loader.model_copy(
            update={
                k: v
                for k, v in {
                    "record_count": args.count,
                    "batch_size": args.batch_size,
                    "seed": args.seed,
                }.items()
                if v is not None
            }
        )
        if args.no_recreate:
            loader = loader.model_copy(update={"recreate_index": False})
        settings = settings.model_copy(update={"loader": loader})

    async with await AsyncCatalogClient.from_settings(settings) as client:
        if args.command == "seed":
            return await _seed(client, settings)
        if args.command == "search":
            _print_json(await _search(client, args))
            return 0
        if args.command == "get":
            item = await client.get(args.id)
            print(item.model_dump_json(indent=2))
            return 0
        if args.command == "delete":
            await client.delete(args.id)
            print(f"Deleted document '{args.id}'")
            return 0
        await _demo(client)
        return 0


async def _seed(client: AsyncCatalogClient, settings: Settings) -> int:
    from catalogsearch.core.generator import generate_products

    records = generate_products(settings.loader.record_count, seed=settings.loader.seed)
    summary = await client.load(records, prepare=settings.loader.recreate_index)

    print(f"Indexed {summary.total_indexed} documents into '{summary.index}' in {len(summary.batches)} batches")
    for batch in summary.failed_batches:
        print(f"  batch {batch.batch_number}: {batch.failed_count} failed ({batch.first_error})", file=sys.stderr)
    if not summary.refreshed:
        print(f"Error: refresh failed: {summary.refresh_error}", file=sys.stderr)
        return 1
    return 0


async def _search(client: AsyncCatalogClient, args: argparse.Namespace) -> SearchResult[Any]:
    if args.kind == "match":
        return await client.match_search(args.field, args.text, from_=args.from_, size=args.size)
    if args.kind == "multi":
        fields = [f.strip() for f in args.fields.split(",")]
        return await client.multi_match_search(args.text, fields, from_=args.from_, size=args.size)
    if args.kind == "range":
        return await client.range_search(args.field, gte=args.gte, gt=args.gt, lte=args.lte, lt=args.lt)
    if args.kind == "fuzzy":
        return await client.fuzzy_search(args.field, args.text, args.fuzziness)
    if args.kind == "phrase":
        return await client.phrase_search(args.field, args.phrase, args.slop)
    return await client.aggregation_search(args.aggregations)


async def _demo(client: AsyncCatalogClient) -> None:
    _print_summary("Match query: name ~ 'laptop'", await client.match_search("name", "laptop", from_=0, size=5))
    _print_summary(
        "Multi-match query: 'gaming laptop' in name, description",
        await client.multi_match_search("gaming laptop", ["name", "description"]),
    )
    _print_summary(
        "Bool query: brand Apple, price >= 1000",
        await client.bool_search(
            must=[{"match": {"brand": "Apple"}}],
            filter=[{"range": {"price": {"gte": 1000}}}],
        ),
    )
    _print_summary("Range query: 1000 <= price <= 2000", await client.range_search("price", gte=1000, lte=2000))
    _print_summary("Fuzzy query: name ~ 'lapto'", await client.fuzzy_search("name", "lapto", 1))
    _print_summary(
        "Aggregation query: average price, categories",
        await client.aggregation_search(
            {
                "avg_price": {"avg": {"field": "price"}},
                "categories": {"terms": {"field": "categories"}},
            }
        ),
    )
    _print_summary(
        "Phrase query: 'gaming laptop' with slop 1",
        await client.phrase_search("description", "gaming laptop", 1),
    )


def _print_summary(title: str, result: SearchResult[Any]) -> None:
    print(f"\n=== {title} ===")
    print(f"Total hits: {result.total}")
    for item in result.items:
        print(f"  [{item.id}] {getattr(item, 'name', '')}")
    if result.aggregations:
        print(json.dumps(result.aggregations, indent=2))


def _print_json(result: SearchResult[Any]) -> None:
    print(result.model_dump_json(indent=2))


def _get_version() -> str:
    """Get the package version."""
    try:
        from catalogsearch import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
