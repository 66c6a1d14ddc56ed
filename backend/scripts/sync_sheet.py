"""Import the book list from the published spreadsheet.

Writes the result to a local JSON file with --output, otherwise commits it to
the configured GitHub document store.
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from bookgroup.domain.books.schemas import Book  # noqa: E402
from bookgroup.domain.books.sheet_sync import sync_from_sheet  # noqa: E402
from bookgroup.domain.covers.finder import CoverFinder  # noqa: E402
from bookgroup.domain.covers.sources import default_sources  # noqa: E402
from bookgroup.domain.store import JsonCollectionStore, encode_document  # noqa: E402
from bookgroup.infra import http as http_infra  # noqa: E402
from bookgroup.infra.github import GitHubConfig, GitHubContentsClient  # noqa: E402
from bookgroup.obs import logging as obs_logging  # noqa: E402
from bookgroup.settings import settings  # noqa: E402


def _parse_args() -> argparse.Namespace:
	parser = argparse.ArgumentParser(description="Sync books from the published spreadsheet")
	parser.add_argument("--url", default=settings.sheet_csv_url, help="Published CSV URL (defaults to SHEET_CSV_URL)")
	parser.add_argument("--output", type=Path, help="Write books JSON here instead of committing")
	return parser.parse_args()


async def sync(url: str, output: Path | None) -> None:
	http = http_infra.build_client()
	try:
		books = await sync_from_sheet(http, CoverFinder(default_sources(http)), url)
		if output is not None:
			output.write_text(encode_document(books), encoding="utf-8")
			print(f"Wrote {len(books)} books to {output}")
			return
		client = GitHubContentsClient(GitHubConfig.from_settings(settings), http)
		store = JsonCollectionStore(client, settings.books_path, Book, name="books")
		_, sha = await store.fetch()
		await store.commit(books, sha, f"Sync {len(books)} books from sheet")
		print(f"Committed {len(books)} books to {settings.books_path}")
	finally:
		await http.aclose()


def main() -> None:
	args = _parse_args()
	if not args.url:
		raise SystemExit("No sheet URL: pass --url or set SHEET_CSV_URL")
	obs_logging.configure_logging()
	asyncio.run(sync(args.url, args.output))


if __name__ == "__main__":
	main()
