#!/usr/bin/env python3
"""
Streaming statistics — summarize delimited files
================================================
Thin entry-point. All logic lives in streamstats.pipeline.

  Whole file:      python3 summarize.py data.csv
  Chosen columns:  python3 summarize.py data.csv -c price -c qty --ddof 1
  Publish partial: python3 summarize.py shard-03.csv --publish nightly
"""

from streamstats.pipeline.cli import main

if __name__ == "__main__":
    main()
