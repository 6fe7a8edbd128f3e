#!/usr/bin/env python3
"""Seed the sentence store from YAML pack files.

Reads every *.yaml file in CONTENT_DIR (default: data/content) and upserts
its languages, packs and sentences. Existing sentences are only backfilled.

Run with: python3 -m scripts.seed_content [--content-dir DIR]
"""
import argparse
import asyncio
from pathlib import Path

from core.config import settings
from core.database import get_db_session, engine, Base
from core.logging import configure_logging
from engines.loader import load_packs_from_dir, save_pack
import models  # noqa: F401

ROOT_DIR = Path(__file__).resolve().parents[2]


async def seed(content_dir: Path) -> int:
    """Seed all packs found in `content_dir`; returns the number of packs saved."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    result = load_packs_from_dir(content_dir)
    if result.is_err():
        print(f"Could not read content: {result.unwrap_err()}")
        return 0

    saved = 0
    async with get_db_session() as session:
        for content in result.unwrap():
            outcome = await save_pack(session, content)
            if outcome.is_err():
                print(f"  Failed {content.language_id}/{content.book}: {outcome.unwrap_err()}")
                continue
            print(f"  {content.language_id}/{content.book}: {outcome.unwrap()} sentences")
            saved += 1
    return saved


async def main(content_dir: Path):
    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
    if not content_dir.exists():
        print(f"No content directory: {content_dir}")
        return

    print(f"Seeding packs from {content_dir}...")
    saved = await seed(content_dir)
    await engine.dispose()
    print(f"\nSeeded {saved} packs")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed sentence packs from YAML files")
    parser.add_argument(
        "--content-dir", "-d",
        type=Path,
        default=ROOT_DIR / settings.CONTENT_DIR,
        help=f"Directory of pack YAML files (default: {settings.CONTENT_DIR})",
    )
    args = parser.parse_args()
    asyncio.run(main(args.content_dir))
