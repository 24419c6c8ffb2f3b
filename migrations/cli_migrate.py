from __future__ import annotations

import argparse
import logging
from functools import partial

from common.config import yaml_config
from common.logger import get_logger, set_level
from common.project_config import ProjectConfigError, load_project_config
from documents.hash_utils import KeyAllocator
from migrations.prompts import confirm_backup, confirm_summary
from migrations.runner import MigrationRunner
from migrations.summary import format_outcome
from store.credentials import find_token, get_token
from store.fetch import fetch_all_documents
from store.sanity_client import SanityClient
from transforms.registry import TRANSFORMS, build_transform

log = get_logger(__name__)


def _positive_int(value: str) -> int:
    n = int(value)
    if n <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Run a one-off structural migration against a Sanity dataset."
    )
    parser.add_argument("migration", choices=sorted(TRANSFORMS), help="Migration to run")
    parser.add_argument(
        "--dataset", type=str, default=None, help="Dataset (defaults to sanity.json)"
    )
    parser.add_argument(
        "--fetch-strategy", choices=["bulk", "paged"], default=yaml_config.fetch.strategy
    )
    parser.add_argument("--page-size", type=_positive_int, default=yaml_config.fetch.page_size)
    parser.add_argument(
        "--yes", "-y", action="store_true", help="Skip the backup reminder"
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args(argv)

    if args.verbose:
        set_level(logging.DEBUG)

    try:
        project = load_project_config()
    except ProjectConfigError as e:
        log.error(
            "Could not read sanity config from current working directory. "
            "Make sure you have a sanity.json.\nError was %s",
            e,
        )
        raise SystemExit(1)

    project_id = project.api.project_id
    dataset = args.dataset or project.api.dataset

    if not args.yes and not confirm_backup(args.migration, dataset):
        print("\nCancelled.\n")
        raise SystemExit(1)

    allocator = KeyAllocator(length=yaml_config.migrations.block_spans.key_length)
    transform = build_transform(args.migration, yaml_config, allocator)

    runner = MigrationRunner(
        client=SanityClient(project_id, dataset, token=find_token()),
        transform=transform,
        confirm=confirm_summary,
        write_client=lambda: SanityClient(project_id, dataset, token=get_token(project_id)),
        fetch=partial(
            fetch_all_documents, strategy=args.fetch_strategy, page_size=args.page_size
        ),
    )
    outcome = runner.run()

    print(f"\n{format_outcome(outcome)}\n")
    if outcome.status == "failed":
        raise SystemExit(1)


if __name__ == "__main__":
    main()
