#!/usr/bin/env python3
"""Download the NOAA storm events extract into data/raw."""

from stormrank.etl.fetch_storm_data import main

if __name__ == "__main__":
    main()
