"""Download the compressed NOAA storm events extract into ``data/raw``."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable, Optional

import requests
from requests.exceptions import RequestException

from ..settings import storm_data_path, storm_data_url
from ..utils.logging import setup_logging

logger = setup_logging(__name__)

CHUNK_SIZE = 8192


def fetch_storm_data(
    url: Optional[str] = None,
    destination: str | Path | None = None,
    force: bool = False,
    timeout: int = 120,
) -> Path:
    """Stream ``url`` to ``destination`` and return the local path.

    An existing file is reused unless ``force`` is set. A failed download
    leaves no partial file behind.
    """

    url = url or storm_data_url()
    path = Path(destination) if destination is not None else storm_data_path()

    if path.exists() and not force:
        logger.info("Using cached storm data at %s", path)
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    partial = path.with_name(path.name + ".part")

    logger.info("Downloading storm data from %s", url)
    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            with open(partial, "wb") as f:
                for chunk in resp.iter_content(CHUNK_SIZE):
                    f.write(chunk)
    except RequestException as exc:
        logger.error("Storm data download failed: %s", exc)
        partial.unlink(missing_ok=True)
        raise

    partial.replace(path)
    logger.info("Saved %d bytes → %s", path.stat().st_size, path)
    return path


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default=None, help="Source URL (default: $STORM_DATA_URL)")
    parser.add_argument(
        "--destination",
        default=None,
        help="Local file to write (default: $STORM_DATA_PATH or data/raw/StormData.csv.bz2)",
    )
    parser.add_argument("--force", action="store_true", help="Download even if the file exists")
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        fetch_storm_data(args.url, args.destination, force=args.force)
    except RequestException:
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
