#!/usr/bin/env python3
"""
VoiceCollect Sentence Seeder

Loads a corpus file into the ``sentences`` table. Two formats are read:

- ``.json``: a list of sentence objects (``text`` plus optional ``id`` /
  ``mozilla_id``, ``source``, ``bucket``, ``hash``, ``taxonomy``...) or a
  list of plain strings, or an object with a ``sentences`` list.
- ``.txt``: one sentence per line; blank lines and ``#`` comments ignored.

Sentences without a corpus id get one derived from their text, so the
script is safe to run multiple times (idempotent).
"""

import argparse
import asyncio
import hashlib
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path for ``src`` imports
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.config import get_settings  # noqa: E402
from src.services.storage.database import get_session, init_db  # noqa: E402
from src.services.storage.repository import VoiceRepository  # noqa: E402


def local_id(text: str) -> tuple[str, str]:
    """Return ``(mozilla_id, hash)`` for a sentence that has no corpus id."""
    digest = hashlib.sha256(text.strip().encode("utf-8")).hexdigest()
    return f"local-{digest[:24]}", digest


def load_items(path: Path, language_code: str, source: str) -> list[dict]:
    """Read *path* into ``import_sentences`` items."""
    if path.suffix.lower() == ".json":
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("sentences", [])
        raw = [{"text": d} if isinstance(d, str) else dict(d) for d in data]
    else:
        with open(path, encoding="utf-8") as f:
            raw = [
                {"text": line.strip()}
                for line in f
                if line.strip() and not line.lstrip().startswith("#")
            ]

    items = []
    for item in raw:
        text = (item.get("text") or "").strip()
        if not text:
            continue
        item["text"] = text
        if not (item.get("mozilla_id") or item.get("id")):
            item["mozilla_id"], derived_hash = local_id(text)
            item.setdefault("hash", derived_hash)
        item.setdefault("language_code", language_code)
        item.setdefault("source", source)
        items.append(item)
    return items


async def seed(path: Path, language_code: str) -> int:
    """Import the sentences in *path*.

    Returns:
        Exit code: 0 on success, 1 if the file is missing.
    """
    if not path.is_file():
        print(f"Corpus file not found: {path}")
        return 1

    await init_db()
    items = load_items(path, language_code, source=path.name)
    if not items:
        print("No sentences found.")
        return 0

    async with get_session() as session:
        result = await VoiceRepository(session).import_sentences(items)

    print(f"\nDone: {result['created']} created, {result['skipped']} skipped.")
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point: parse arguments and run the async seed coroutine."""
    parser = argparse.ArgumentParser(description="Load a sentence corpus into VoiceCollect.")
    parser.add_argument("corpus", type=Path, help="Path to a .json or .txt corpus file")
    parser.add_argument(
        "--language",
        default=get_settings().language_code,
        help="Language code for sentences that do not carry one (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    print("VoiceCollect Sentence Seeder")
    print(f"Corpus file: {args.corpus}\n")
    return asyncio.run(seed(args.corpus, args.language))


if __name__ == "__main__":
    sys.exit(main())
