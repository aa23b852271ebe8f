import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import uvicorn

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import get_settings
from src.components.catalog import catalog_from_rules
from src.components.filters import (
    FilterGroup,
    FilterTreeError,
    describe_tree,
    filter_to_dict,
    get_filter_group_signature,
    group_from_dict,
)
from src.components.saved_views import FilterConfig
from src.rules.loader import load_rules
from src.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def get_rules() -> Rules:
    rules_path = get_settings().rules_path
    if not Path(rules_path).exists():
        logger.error("Rules file %s not found.", rules_path)
        sys.exit(1)
    return load_rules(Path(rules_path))


def read_tree(path: Path, max_depth: int) -> FilterGroup:
    """Read a root group, or a saved filter config holding one, from JSON."""
    if not path.exists():
        logger.error("File %s not found.", path)
        sys.exit(1)

    data: Any = json.loads(path.read_text())
    try:
        if isinstance(data, dict) and ("filterGroup" in data or "advancedFilters" in data):
            return FilterConfig.from_dict(data, max_depth=max_depth).root_group()
        return group_from_dict(data, max_depth=max_depth)
    except FilterTreeError as e:
        for err in e.errors:
            logger.error("%s: %s (%s)", err.path or "$", err.message, err.code)
        sys.exit(1)


def handle_migrate(args: argparse.Namespace) -> None:
    settings = get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    print(f"Applied {len(applied)} migrations to {settings.db_path}.")


def handle_serve(args: argparse.Namespace) -> None:
    print(f"Serving on http://{args.host}:{args.port}")
    uvicorn.run("src.api.main:app", host=args.host, port=args.port)


def handle_check_rules(args: argparse.Namespace) -> None:
    rules = get_rules()
    catalog = catalog_from_rules(rules)
    print(f"Rules OK: {rules.project.slug} v{rules.project.rules_version}")
    for key in catalog.resource_keys():
        print(f" - {key}: {len(catalog.fields_for(key))} fields")


def handle_signature(args: argparse.Namespace) -> None:
    rules = get_rules()
    tree = read_tree(Path(args.path), rules.filters.max_depth)
    print(get_filter_group_signature(tree))


def handle_describe(args: argparse.Namespace) -> None:
    rules = get_rules()
    summary = describe_tree(read_tree(Path(args.path), rules.filters.max_depth))
    print(
        json.dumps(
            {
                "signature": summary.signature,
                "is_advanced": summary.is_advanced,
                "leaf_count": len(summary.filters),
                "filters": [filter_to_dict(f) for f in summary.filters],
            },
            indent=2,
        )
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Coach CRM filters CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # check-rules
    subparsers.add_parser("check-rules", help="Validate rules.yaml and list catalogs")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    # signature
    signature_parser = subparsers.add_parser("signature", help="Print a tree's signature")
    signature_parser.add_argument("path", help="JSON file with a root group or filter config")

    # describe
    describe_parser = subparsers.add_parser("describe", help="Summarize a filter tree")
    describe_parser.add_argument("path", help="JSON file with a root group or filter config")

    args = parser.parse_args()

    if args.command == "migrate":
        handle_migrate(args)
    elif args.command == "check-rules":
        handle_check_rules(args)
    elif args.command == "serve":
        handle_serve(args)
    elif args.command == "signature":
        handle_signature(args)
    elif args.command == "describe":
        handle_describe(args)


if __name__ == "__main__":
    main()
