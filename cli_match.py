"""Terminal client for the catalog matcher."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Iterable

from catalog_matching.batch import batch_report, normalize_products
from catalog_matching.catalog import CatalogContext
from catalog_matching.characteristics import CharacteristicMatcher
from catalog_matching.config import settings
from catalog_matching.es_client import get_client
from catalog_matching.extractor import extract_model_name
from catalog_matching.filters import code_map_from_catalog, parse_filters_csv
from catalog_matching.models import ProductRecord
from catalog_matching.reference import normalize_model_name
from catalog_matching.search import search_variants

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def _print(payload: object) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _read_lines(file_path: Path) -> list[str]:
    with file_path.open("r", encoding="utf-8") as fh:
        return [line.strip() for line in fh if line.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Reconcile procurement text with reference catalogs")
    parser.add_argument("--models", default=settings.model_catalog_path, help="Model catalog file")
    parser.add_argument(
        "--characteristics",
        default=settings.characteristic_catalog_path,
        help="Characteristic catalog file (';'-separated)",
    )
    parser.add_argument("--log-level", default=settings.log_level)
    commands = parser.add_subparsers(dest="command", required=True)

    model = commands.add_parser("model", help="Extract a model name from a certificate description")
    model.add_argument("text")

    normalize = commands.add_parser("normalize", help="Map an isolated model name onto the catalog")
    normalize.add_argument("name")

    characteristic = commands.add_parser("characteristic", help="Match a characteristic label")
    characteristic.add_argument("label", nargs="+")

    filters = commands.add_parser("filters", help="Parse a CSV filter upload")
    filters.add_argument("file", type=Path)

    search = commands.add_parser("search", help="Find model variants matching a CSV filter upload")
    search.add_argument("file", type=Path)
    search.add_argument("--model", help="Restrict to model names containing this text")
    search.add_argument("--ktru", help="Restrict to one KTRU code")
    search.add_argument("--limit", type=int, default=settings.search_result_size)
    search.add_argument("--es-host", help="Elasticsearch URL (defaults to ES_HOST)")

    batch = commands.add_parser("batch", help="Extract model names for every line of a file")
    batch.add_argument("file", type=Path)
    batch.add_argument("--workers", type=int, default=settings.batch_workers)
    return parser


def main(argv: Iterable[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    configure_logging(args.log_level)
    context = CatalogContext(args.models, args.characteristics)

    if args.command == "model":
        _print(extract_model_name(context.models, args.text).model_dump())
    elif args.command == "normalize":
        _print(normalize_model_name(context.models, args.name).model_dump())
    elif args.command == "characteristic":
        matcher = CharacteristicMatcher(context)
        _print([match.model_dump() for _, match in matcher.match_characteristics(args.label)])
    elif args.command == "filters":
        result = parse_filters_csv(args.file.read_bytes(), code_map_from_catalog(context.characteristics))
        _print(result.model_dump(mode="json"))
    elif args.command == "search":
        parsed = parse_filters_csv(args.file.read_bytes(), code_map_from_catalog(context.characteristics))
        response = asyncio.run(
            search_variants(
                get_client(args.es_host),
                parsed.filters,
                model_name=args.model,
                ktru_code=args.ktru,
                limit=args.limit,
            )
        )
        _print({**response, "not_found": parsed.not_found})
    elif args.command == "batch":
        records = [ProductRecord(certificate_name=line) for line in _read_lines(args.file)]
        products = normalize_products(context, records, workers=args.workers)
        _print(
            {
                "results": [product.model.model_dump() for product in products if product.model],
                "report": batch_report(products),
            }
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
