#!/usr/bin/env python3
"""Example: Count birds for a short session and export the results.

This example demonstrates how to:
1. Start a session on the bundled taxonomy and a regional checklist
2. Search for species and record counts
3. Correct a count
4. Summarize and export the tally
"""

import asyncio
import logging
from pathlib import Path

from birdcount import BirdCountConfig, BirdCountSession
from birdcount.config import configure_logging
from birdcount.summary import DateRangePreset


async def main():
    """Record a few sightings and print the summary."""
    configure_logging(logging.INFO)

    config = BirdCountConfig(store_path=Path("tally_session.json"))
    session = BirdCountSession(config)
    await session.start()

    task = session.select_checklist("checklist-US-ME")
    if task is not None:
        await task
    if session.catalog.checklist_error:
        print(f"Checklist unavailable: {session.catalog.checklist_error}")

    print("Searching for 'ch'...")
    for taxon in session.search("ch")[:5]:
        print(f"  {taxon.common_name} ({taxon.scientific_name})")
        print(f"     Commonness: {taxon.commonness_label or 'Unranked'}")
    print()

    session.log.increment("bkcchi", by=4)
    session.log.increment("amecro", by=2)
    session.log.increment("blujay")

    # Miscounted the chickadees
    session.log.set("bkcchi", 3)

    print(f"Species observed: {session.log.total_species_observed}")
    print(f"Total individuals: {session.log.total_individuals}")
    print("Recently counted:")
    for entry in session.log.recent:
        taxon = session.catalog.get(entry.taxon_id)
        print(f"  {taxon.common_name if taxon else entry.taxon_id}")
    print()

    summary = session.summary(DateRangePreset.TODAY)
    print(summary.export_text(include_counts=True))
    print()

    output_file = "tally_summary.csv"
    summary.to_dataframe().to_csv(output_file, index=False)
    print(f"Saved {summary.species_count} species to {output_file}")


if __name__ == "__main__":
    asyncio.run(main())
