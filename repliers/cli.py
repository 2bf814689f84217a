"""Command line entry point for the Repliers client."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Iterable

from .client import RepliersClient
from .config import ENV_API_KEY, ENV_BASE_URL, ENV_TIMEOUT, load_settings
from .constants import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from .errors import AuthenticationError, RepliersError, ValidationError
from .models import (
    AddressHistoryQuery,
    AiSearchQuery,
    DeletedListingsQuery,
    SearchFilters,
    SimilarListingsQuery,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query the Repliers real-estate listings API")
    parser.add_argument("--api-key", help=f"API key. Defaults to the {ENV_API_KEY} env var")
    parser.add_argument("--base-url", help=f"Override the API base URL. Defaults to {ENV_BASE_URL} or {DEFAULT_BASE_URL}")
    parser.add_argument(
        "--timeout",
        type=float,
        help=f"Request timeout in seconds. Defaults to {ENV_TIMEOUT} or {DEFAULT_TIMEOUT}",
    )
    parser.add_argument("--env-file", help="Read REPLIERS_* settings from this .env file")
    parser.add_argument("--output", help="Write the JSON result to this file instead of stdout")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    subcommands = parser.add_subparsers(dest="command", required=True)

    search = subcommands.add_parser("search", help="Search listings with filters")
    search.add_argument("--city")
    search.add_argument("--status", action="append", default=[], help="Listing status, repeatable")
    search.add_argument("--min-price", type=float)
    search.add_argument("--max-price", type=float)
    search.add_argument("--bedrooms", type=int)
    search.add_argument("--property-type", action="append", default=[], help="Property type, repeatable")
    search.add_argument("--page", type=int)
    search.add_argument("--results-per-page", type=int)
    search.add_argument("--board-id")

    ai = subcommands.add_parser("ai-search", help="Search listings with a natural-language prompt")
    ai.add_argument("prompt")
    ai.add_argument("--board-id")
    ai.add_argument("--nlp-id", help="Continue a previous AI search")

    listing = subcommands.add_parser("listing", help="Fetch a single listing")
    listing.add_argument("mls_number")
    listing.add_argument("--board-id")

    similar = subcommands.add_parser("similar", help="Fetch listings similar to a listing")
    similar.add_argument("mls_number")
    similar.add_argument("--radius", type=float, help="Search radius in kilometres")
    similar.add_argument("--list-price-range", type=float)
    similar.add_argument("--board-id")

    history = subcommands.add_parser("history", help="Fetch the listing history of an address")
    history.add_argument("--street-number", required=True)
    history.add_argument("--street-name", required=True)
    history.add_argument("--city", required=True)
    history.add_argument("--state", required=True)
    history.add_argument("--zip")
    history.add_argument("--board-id")

    deleted = subcommands.add_parser("deleted", help="Fetch listings deleted in a date window")
    deleted.add_argument("--min-date", help="YYYY-MM-DD")
    deleted.add_argument("--max-date", help="YYYY-MM-DD")
    deleted.add_argument("--updated-on", help="YYYY-MM-DD")
    deleted.add_argument("--page", type=int)
    deleted.add_argument("--results-per-page", type=int)
    deleted.add_argument("--board-id")

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        settings = load_settings(
            args.env_file,
            api_key=args.api_key,
            base_url=args.base_url,
            timeout=args.timeout,
        )
        client = RepliersClient.from_settings(settings)
    except ValidationError as exc:
        parser.error(f"Invalid configuration: {exc}")

    with client:
        try:
            result = _run(client, args)
        except ValidationError as exc:
            print(f"[error] Invalid input: {exc}", file=sys.stderr)
            return 1
        except AuthenticationError as exc:
            print(f"[error] Authentication failed: {exc}", file=sys.stderr)
            return 1
        except RepliersError as exc:
            print(f"[error] Request failed: {exc}", file=sys.stderr)
            return 1

    payload = result.as_dict()
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        _write_json(output_path, payload)
        if args.verbose:
            print(f"[info] Wrote {args.command} result to {output_path}", file=sys.stderr)
    else:
        json.dump(payload, sys.stdout, indent=2)
        sys.stdout.write("\n")
    return 0


def _run(client: RepliersClient, args: argparse.Namespace) -> Any:
    command = args.command
    if command == "search":
        filters = SearchFilters(
            city=args.city,
            status=tuple(args.status),
            min_price=args.min_price,
            max_price=args.max_price,
            bedrooms=args.bedrooms,
            property_type=tuple(args.property_type),
            page=args.page,
            results_per_page=args.results_per_page,
            board_id=args.board_id,
        )
        result = client.search_listings(filters)
        if not result.listings:
            print("[warn] No listings matched the filters.", file=sys.stderr)
        return result
    if command == "ai-search":
        return client.ai_search(AiSearchQuery(prompt=args.prompt, board_id=args.board_id, nlp_id=args.nlp_id))
    if command == "listing":
        return client.get_listing(args.mls_number, board_id=args.board_id)
    if command == "similar":
        query = SimilarListingsQuery(
            mls_number=args.mls_number,
            radius=args.radius,
            list_price_range=args.list_price_range,
            board_id=args.board_id,
        )
        return client.get_similar_listings(query)
    if command == "history":
        query = AddressHistoryQuery(
            street_number=args.street_number,
            street_name=args.street_name,
            city=args.city,
            state=args.state,
            zip=args.zip,
            board_id=args.board_id,
        )
        return client.get_address_history(query)
    if command == "deleted":
        query = DeletedListingsQuery(
            min_date=args.min_date,
            max_date=args.max_date,
            updated_on=args.updated_on,
            page=args.page,
            results_per_page=args.results_per_page,
            board_id=args.board_id,
        )
        return client.get_deleted_listings(query)
    raise ValueError(f"Unknown command {command!r}")


def _write_json(path: Path, payload: Any) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
