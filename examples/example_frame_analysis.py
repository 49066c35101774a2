#!/usr/bin/env python3
"""
Basic Frame Analysis Example

This example demonstrates the longitudinal analysis workflow of the Lavi
library. It shows how to:

1. Import a LAX act log
2. Inspect the community
3. Slide act frames over the community and stream records to CSV
4. Summarise the records per frame

The example uses a small mailing list with three threads.
"""

import sys
from pathlib import Path

# Add the src directory to the Python path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import polars as pl
from lavi import FrameAnalyst, import_lax, setup_logging, summarize_frames


def main():
    """Main function demonstrating the frame analysis workflow."""

    setup_logging(level="INFO")

    print("=" * 60)
    print("Basic Frame Analysis Example")
    print("=" * 60)

    # Step 1: Load the act log
    print("\n1. Loading Mailing List Act Log")
    print("-" * 40)

    data_path = Path(__file__).parent / "data" / "mailing_list.lax"
    community = import_lax(data_path, use_dates=True)

    # Step 2: Inspect
    print("\n2. Community Summary")
    print("-" * 40)
    print(community.summary())
    print(f"First act: {community.acts[0].describe(use_dates=True)}")

    # Step 3: Analyse
    print("\n3. Sliding Frame Analysis")
    print("-" * 40)

    analyst = FrameAnalyst(community)
    analyst.setup(frame_size=6)
    print(f"Frame size: {analyst.frame_size} acts, step size: {analyst.step_size} acts")

    output_path = Path(__file__).parent / "output" / "mailing_list_frames.csv"
    run = analyst.run_to_csv(output_path)
    print(f"Analysed {len(run.frames)} of {run.steps} frames, wrote {run.rows} records to {output_path}")

    # Step 4: Summarise
    print("\n4. Per-Frame Summary")
    print("-" * 40)

    records = pl.read_csv(output_path)
    with pl.Config(tbl_rows=20):
        print(summarize_frames(records))

    print("\n" + "=" * 60)
    print("Analysis complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
