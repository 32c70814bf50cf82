"""
Development script for decoding STL files to ASS.

Usage:
    Simply run: python dev.py

This will decode the sample STL files and write an .ass file next to each.
"""

import sys
import os
import json
import logging

# Add the project root to path for imports
sys.path.insert(0, os.path.dirname(__file__))

from ebustl_cues import STLReader


def read_stl():
    samples_dir = os.path.join(os.path.dirname(__file__), "samples")
    output_dir = os.path.join(os.path.dirname(__file__), "output")

    # Create output directory if it doesn't exist
    os.makedirs(output_dir, exist_ok=True)

    # List of sample files to process
    stl_files = [
        # Provide your own STL files here
    ]

    for stl_file in stl_files:
        stl_path = os.path.join(samples_dir, stl_file)

        if not os.path.exists(stl_path):
            print(f"File not found: {stl_path}")
            continue

        ass_path = os.path.join(output_dir, os.path.splitext(stl_file)[0] + ".ass")

        try:
            with open(stl_path, "rb") as f:
                raw_data = f.read()
            reader = STLReader()
            result = reader.read(raw_data)
            print(f"File: {stl_file}")
            print(json.dumps(result["cues"], indent=4, ensure_ascii=False))
            reader.to_ass().save(ass_path, format_="ass")
            print(f"Output: {ass_path}")
            print(f"{'=' * 60}")
        except (OSError, ValueError) as e:
            print(f"\n✗ Error reading {stl_file}: {e}")


def main():
    logging.basicConfig(level=logging.INFO)
    read_stl()


if __name__ == "__main__":
    main()
