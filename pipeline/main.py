"""
docsync command line.

    docsync sync path/to/file.py --target both
    docsync sync-project . --target confluence
    docsync status
"""

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path

from confluence.config import (
    API_TOKEN_KEY,
    BASE_URL_KEY,
    CONFLUENCE_KEYS,
    PARENT_PAGE_ID_KEY,
    SPACE_KEY_KEY,
    USERNAME_KEY,
    load_confluence_settings,
)
from extraction.languages import detect_language
from extraction.source_extractor import parse_document
from notion.config import API_KEY_KEY, DATABASE_ID_KEY, load_notion_settings
from pipeline.sync_pipeline import SyncOutcome, SyncPipeline, Target
from shared.config import mask_secret, setup_logging
from shared.errors import DocSyncError
from shared.settings_store import SettingsStore
from transform.confluence_storage import to_storage
from transform.notion_blocks import to_blocks
from transform.storage_check import storage_problems

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2


def _read_document(path: str, language: str = None):
    content = Path(path).read_text(encoding="utf-8", errors="replace")
    return parse_document(content, path, language or detect_language(path))


async def cmd_sync(args, store: SettingsStore) -> int:
    document = _read_document(args.path, args.language)
    pipeline = SyncPipeline.from_environment(store)
    try:
        report = await pipeline.sync(document, Target(args.target))
    finally:
        await pipeline.aclose()

    if report.notion_url:
        print(f"Notion: {report.notion_url}")
    if report.confluence_url:
        print(f"Confluence: {report.confluence_url}")

    if Target(args.target) is not Target.BOTH:
        print(f"Successfully synced {args.path} to {args.target.capitalize()}!")
        return EXIT_OK

    print(report.message)
    if report.outcome is SyncOutcome.BOTH:
        return EXIT_OK
    if report.outcome is SyncOutcome.NEITHER:
        return EXIT_FAILED
    return EXIT_PARTIAL


async def cmd_sync_project(args, store: SettingsStore) -> int:
    pipeline = SyncPipeline.from_environment(store)
    try:
        reports = await pipeline.sync_workspace(args.root, Target(args.target))
    finally:
        await pipeline.aclose()

    failed = [r for r in reports if r.errors]
    for report in failed:
        print(f"FAILED {report.title}: {'; '.join(report.errors.values())}")
    print(f"Synced {len(reports) - len(failed)}/{len(reports)} files")
    return EXIT_OK if not failed else EXIT_PARTIAL


async def cmd_status(args, store: SettingsStore) -> int:
    pipeline = SyncPipeline.from_environment(store)
    try:
        results = await pipeline.test_connections()
    finally:
        await pipeline.aclose()

    if results["notion"] and results["confluence"]:
        print("Connected to Notion and Confluence")
    elif results["notion"]:
        print("Connected to Notion")
    elif results["confluence"]:
        print("Connected to Confluence")
    else:
        print("Not authenticated to Notion or Confluence. Run `docsync configure` or set environment variables in a .env file.")
        return EXIT_FAILED
    return EXIT_OK


async def cmd_configure(args, store: SettingsStore) -> int:
    if args.platform == "notion":
        api_key = getpass.getpass("Notion integration token: ").strip()
        if not api_key:
            return EXIT_FAILED
        store.update(API_KEY_KEY, api_key)
        database_id = input("Notion database ID (ID or URL): ").strip()
        if database_id:
            store.update(DATABASE_ID_KEY, database_id)
        print("Notion credentials saved!")
        return EXIT_OK

    prompts = [
        (BASE_URL_KEY, "Confluence base URL (https://your-domain.atlassian.net): ", input),
        (USERNAME_KEY, "Confluence username/email: ", input),
        (API_TOKEN_KEY, "Confluence API token: ", getpass.getpass),
        (SPACE_KEY_KEY, "Confluence space key: ", input),
    ]
    values = {}
    for key, prompt, ask in prompts:
        value = ask(prompt).strip()
        if not value:
            return EXIT_FAILED
        values[key] = value
    parent_page_id = input("Parent page ID (optional, empty for space root): ").strip()

    for key, value in values.items():
        store.update(key, value)
    if parent_page_id:
        store.update(PARENT_PAGE_ID_KEY, parent_page_id)

    pipeline = SyncPipeline.from_environment(store)
    try:
        connected = (await pipeline.test_connections())["confluence"]
    finally:
        await pipeline.aclose()

    if connected:
        print("Confluence credentials saved and connection verified!")
        return EXIT_OK
    print("Confluence credentials saved but connection test failed. Please verify your settings.")
    return EXIT_FAILED


async def cmd_show_config(args, store: SettingsStore) -> int:
    notion = load_notion_settings(store)
    confluence = load_confluence_settings(store)

    print("Docs Sync - Effective Configuration (masked)")
    print("---")
    print(f"Notion API Key: {mask_secret(notion.api_key)}")
    print(f"Notion Database ID: {mask_secret(notion.database_id)}")
    print("")
    print(f"Confluence Base URL: {confluence.base_url or '(not set)'}")
    print(f"Confluence Username: {mask_secret(confluence.username)}")
    print(f"Confluence Space Key: {confluence.space_key or '(not set)'}")
    print(f"Confluence Parent Page ID: {confluence.parent_page_id or '(not set)'}")
    return EXIT_OK


async def cmd_clear_config(args, store: SettingsStore) -> int:
    if not args.yes:
        answer = input("Remove the saved Notion database ID and Confluence settings? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            return EXIT_OK
    removed = store.clear((DATABASE_ID_KEY,) + CONFLUENCE_KEYS)
    print(f"Cleared {removed} saved settings from {store.path}")
    return EXIT_OK


async def cmd_preview(args, store: SettingsStore) -> int:
    document = _read_document(args.path, args.language)

    if args.target == "notion":
        for block in to_blocks(document.content, document.language):
            print(f"[{block.notion_type}] {block.text}")
        return EXIT_OK

    storage = to_storage(document.content)
    print(storage)
    for problem in storage_problems(storage):
        print(f"warning: {problem}", file=sys.stderr)
    return EXIT_OK


async def cmd_confluence_spaces(args, store: SettingsStore) -> int:
    pipeline = SyncPipeline.from_environment(store)
    try:
        spaces = await pipeline.confluence().get_spaces()
    finally:
        await pipeline.aclose()
    for space in spaces:
        print(f"{space.get('key')}\t{space.get('name')}")
    return EXIT_OK


async def cmd_confluence_pages(args, store: SettingsStore) -> int:
    pipeline = SyncPipeline.from_environment(store)
    try:
        pages = await pipeline.confluence().get_pages(args.space_key)
    finally:
        await pipeline.aclose()
    for page in pages:
        print(f"{page.get('id')}\t{page.get('title')}")
    return EXIT_OK


async def cmd_notion_databases(args, store: SettingsStore) -> int:
    pipeline = SyncPipeline.from_environment(store)
    try:
        databases = await pipeline.notion().list_databases()
    finally:
        await pipeline.aclose()
    if not databases:
        print("No databases found. Share a database with the integration first.")
    for database_id, title in databases:
        print(f"{database_id.replace('-', '')}\t{title}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docsync", description="Sync source documentation to Notion and Confluence")
    sub = parser.add_subparsers(dest="command", required=True)
    targets = [t.value for t in Target]

    p = sub.add_parser("sync", help="Sync one file")
    p.add_argument("path")
    p.add_argument("--target", choices=targets, default=Target.BOTH.value)
    p.add_argument("--language", help="Override the language detected from the extension")
    p.set_defaults(func=cmd_sync)

    p = sub.add_parser("sync-project", help="Sync every source file under a directory")
    p.add_argument("root", nargs="?", default=".")
    p.add_argument("--target", choices=targets, default=Target.BOTH.value)
    p.set_defaults(func=cmd_sync_project)

    p = sub.add_parser("status", help="Check connectivity to both platforms")
    p.set_defaults(func=cmd_status)

    p = sub.add_parser("configure", help="Save credentials for a platform")
    p.add_argument("platform", choices=["notion", "confluence"])
    p.set_defaults(func=cmd_configure)

    p = sub.add_parser("show-config", help="Show the effective configuration, secrets masked")
    p.set_defaults(func=cmd_show_config)

    p = sub.add_parser("clear-config", help="Remove saved Notion database ID and Confluence settings")
    p.add_argument("--yes", action="store_true")
    p.set_defaults(func=cmd_clear_config)

    p = sub.add_parser("preview", help="Print the translated content without syncing")
    p.add_argument("path")
    p.add_argument("--target", choices=["notion", "confluence"], default="confluence")
    p.add_argument("--language")
    p.set_defaults(func=cmd_preview)

    p = sub.add_parser("confluence-spaces", help="List Confluence spaces")
    p.set_defaults(func=cmd_confluence_spaces)

    p = sub.add_parser("confluence-pages", help="List pages in a Confluence space")
    p.add_argument("space_key")
    p.set_defaults(func=cmd_confluence_pages)

    p = sub.add_parser("notion-databases", help="List Notion databases shared with the integration")
    p.set_defaults(func=cmd_notion_databases)

    return parser


def main(argv=None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    store = SettingsStore()

    try:
        return asyncio.run(args.func(args, store))
    except DocSyncError as e:
        logger.error(str(e))
        return EXIT_FAILED
    except Exception as e:
        logger.critical(f"Fatal error during execution: {e}", exc_info=True)
        return EXIT_FAILED


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
