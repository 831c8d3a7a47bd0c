import argparse
import json
import sqlite3
import sys

from src.config.settings import SyncSettings
from src.docsync.infrastructure.mapping_sqlite import SQLiteCollectionMappingRepository
from src.docsync.pipeline import run_export, run_sync


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m src.docsync")
    parser.add_argument("--no-progress", action="store_true", help="hide progress bars")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("export", help="export source documents into the staging directory")
    commands.add_parser("sync", help="replace the knowledge collections with the staged files")

    mappings = commands.add_parser("mappings", help="manage collection routing")
    mapping_commands = mappings.add_subparsers(dest="mapping_command", required=True)
    mapping_commands.add_parser("list")
    add = mapping_commands.add_parser("add")
    add.add_argument("source_collection", help="staged subdirectory name, e.g. Human_Resources")
    add.add_argument("knowledge_collection_ids", nargs="+")
    remove = mapping_commands.add_parser("remove")
    remove.add_argument("source_collection")
    return parser


def _run_mappings(args: argparse.Namespace, settings: SyncSettings) -> int:
    repo = SQLiteCollectionMappingRepository(settings.mappings_db_path)
    try:
        if args.mapping_command == "list":
            print(json.dumps([m.to_dict() for m in repo.list_mappings()], ensure_ascii=False, indent=2))
        elif args.mapping_command == "add":
            try:
                mapping = repo.create_mapping(args.source_collection, args.knowledge_collection_ids)
            except sqlite3.IntegrityError:
                print(f"Mapping for {args.source_collection} already exists", file=sys.stderr)
                return 1
            except ValueError as exc:
                print(f"Invalid mapping: {exc}", file=sys.stderr)
                return 1
            print(json.dumps(mapping.to_dict(), ensure_ascii=False, indent=2))
        elif args.mapping_command == "remove":
            if not repo.delete_mapping(args.source_collection):
                print(f"No mapping for {args.source_collection}", file=sys.stderr)
                return 1
    finally:
        repo.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = SyncSettings.from_env()

    if args.command == "mappings":
        return _run_mappings(args, settings)

    runner = run_export if args.command == "export" else run_sync
    result = runner(settings, show_progress=not args.no_progress)
    print(result.message)
    return 0 if result.ok else 1


# python -m src.docsync export
if __name__ == "__main__":
    sys.exit(main())
