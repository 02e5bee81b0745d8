#!/usr/bin/env python3
"""
Streaming statistics — merge partial summaries
==============================================
Thin entry-point. All logic lives in streamstats.pipeline.

  From Redis:  python3 reduce_partials.py nightly
  From files:  python3 reduce_partials.py --json a.json --json b.json
"""

from streamstats.pipeline.cli import reduce_main

if __name__ == "__main__":
    reduce_main()
