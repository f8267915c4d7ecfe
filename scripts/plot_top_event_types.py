#!/usr/bin/env python3
"""Chart the storm event types with the most fatalities and property damage."""

from stormrank.report import main

if __name__ == "__main__":
    main()
