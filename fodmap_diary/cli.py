"""CLI commands for the FODMAP diary."""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy.orm import Session

from fodmap_diary.config import MIGRATIONS_DIR, settings
from fodmap_diary.database import SessionLocal
from fodmap_diary.services.diary_service import DiaryService
from fodmap_diary.services.diary_store import DiaryStore
from fodmap_diary.services.entries import dump_entry, parse_entry

logger = logging.getLogger(__name__)


def serve(host: str, port: int, reload: bool = False) -> None:
    """Run the web app under uvicorn."""
    import uvicorn

    uvicorn.run(
        "fodmap_diary.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def upgrade_db() -> None:
    """Apply the migrations shipped with the package up to head."""
    from alembic import command
    from alembic.config import Config

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    command.upgrade(config, "head")
    print("Database is up to date.")


def export_entries(output: str | None = None) -> None:
    """Write every entry, newest first, as a JSON list."""
    db: Session = SessionLocal()

    try:
        entries = DiaryService(DiaryStore(db)).list_entries()
        payload = json.dumps(entries, indent=2, ensure_ascii=False)

        if output:
            Path(output).write_text(payload + "\n", encoding="utf-8")
            print(f"Exported {len(entries)} entries to {output}")
        else:
            print(payload)

    finally:
        db.close()


def _records_from_dump(data) -> list[tuple[str, dict]]:
    """Accept a JSON list of entries or a ``{key: entry}`` key-value dump."""
    if isinstance(data, dict):
        items = list(data.items())
    elif isinstance(data, list):
        items = [(item.get("key") or item.get("timestamp"), item) for item in data if isinstance(item, dict)]
    else:
        raise ValueError("Expected a JSON list or object of entries")

    records = []
    for key, value in items:
        if not key or not isinstance(value, dict):
            raise ValueError(f"Entry without a timestamp key: {value!r}")
        value = {k: v for k, v in value.items() if k != "key"}
        value.setdefault("timestamp", key)
        records.append((key, value))
    return records


def import_entries(path: str, overwrite: bool = False) -> None:
    """Load entries exported by ``export`` or dumped from the old key-value store."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        records = _records_from_dump(data)
    except (OSError, ValueError) as e:
        print(f"Error: Could not read {path}: {e}")
        sys.exit(1)

    db: Session = SessionLocal()

    try:
        store = DiaryStore(db)
        imported = skipped = 0
        for key, value in records:
            if not overwrite and store.exists(key):
                skipped += 1
                continue
            store.put(key, value)
            imported += 1

        print(f"Imported {imported} entries ({skipped} skipped)")

    finally:
        db.close()


def normalize_entries() -> None:
    """Rewrite legacy-shaped records (``fodmaps``/``other`` maps) in the current shape."""
    db: Session = SessionLocal()

    try:
        store = DiaryStore(db)
        rewritten = invalid = 0
        for key, value in list(store.scan_all()):
            try:
                normalized = dump_entry(parse_entry(value))
            except ValidationError as e:
                logger.warning("Skipping entry %s: %s", key, e)
                invalid += 1
                continue
            if normalized != value:
                store.put(key, normalized)
                rewritten += 1

        print(f"Normalized {rewritten} entries ({invalid} could not be read)")

    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="FODMAP Diary CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the web app")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=3000, help="Port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    subparsers.add_parser("init-db", help="Apply database migrations")

    export_parser = subparsers.add_parser("export", help="Export entries as JSON")
    export_parser.add_argument("--output", help="File to write (stdout if omitted)")

    import_parser = subparsers.add_parser("import", help="Import entries from JSON")
    import_parser.add_argument("path", help="JSON file to import")
    import_parser.add_argument(
        "--overwrite", action="store_true", help="Replace entries with the same key"
    )

    subparsers.add_parser("normalize", help="Rewrite legacy entries in the current shape")

    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "serve":
        serve(args.host, args.port, args.reload)
    elif args.command == "init-db":
        upgrade_db()
    elif args.command == "export":
        export_entries(args.output)
    elif args.command == "import":
        import_entries(args.path, args.overwrite)
    elif args.command == "normalize":
        normalize_entries()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
