#!/usr/bin/env python3
"""Search the Spotify catalog from the command line.

Hey future me - this is the quickest way to smoke-test credentials and the
mapping layer against the real API. It reads credentials from the same
settings as the library (env vars or .env):

    CATALOGSPOT_SPOTIFY__CLIENT_ID=...
    CATALOGSPOT_SPOTIFY__CLIENT_SECRET=...

Usage:
    python scripts/search_catalog.py "miles davis kind of blue"
    python scripts/search_catalog.py "hello" track,album 5
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


async def search_catalog(query: str, types: str, limit: int) -> bool:
    """Run one search and print the results.

    Returns:
        True if the search succeeded, False otherwise.
    """
    from catalogspot import CatalogClient, DomainException, SearchType
    from catalogspot.config import get_settings
    from catalogspot.infrastructure.observability import configure_logging

    settings = get_settings()
    configure_logging(log_level=settings.log_level, json_format=settings.log_json)

    try:
        search_type = SearchType.from_string(types)
        async with CatalogClient.from_settings(settings) as client:
            response = await client.search(query, search_type, limit=limit)
    except DomainException as e:
        print(f"  ERROR: {e.message}")
        return False

    for label, page in (
        ("Tracks", response.tracks),
        ("Albums", response.albums),
        ("Artists", response.artists),
        ("Playlists", response.playlists),
    ):
        if page is None:
            continue
        print(f"{label} ({len(page)} of {page.total}):")
        for item in page:
            print(f"  {item.id}  {item.name}")
        print()
    return True


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)

    query_arg = sys.argv[1]
    types_arg = sys.argv[2] if len(sys.argv) > 2 else "track,album,artist"
    limit_arg = int(sys.argv[3]) if len(sys.argv) > 3 else 10

    ok = asyncio.run(search_catalog(query_arg, types_arg, limit_arg))
    sys.exit(0 if ok else 1)
