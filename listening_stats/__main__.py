"""Entry point for listening history ingestion and reports"""
import json
import logging
import os
import sys
import traceback

from listening_stats.config import settings
from listening_stats.history import ListeningHistory

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO), format='%(message)s')
logger = logging.getLogger(__name__)

def run() -> None:
    """Ingest the history folder and write reports."""
    history = None
    try:
        if not os.path.isdir(settings.HISTORY_DIR) or not os.listdir(settings.HISTORY_DIR):
            raise FileNotFoundError(f"No history files found in {settings.HISTORY_DIR}")

        logger.info("Using configuration:")
        logger.info(json.dumps(settings.model_dump(), indent=2))

        history = ListeningHistory(settings)
        summary = history.ingest(settings.HISTORY_DIR)
        stats = history.stats(summary)

        os.makedirs(settings.OUTPUT_DIR, exist_ok=True)
        output_path = os.path.join(settings.OUTPUT_DIR, "general.json")
        with open(output_path, 'w') as f:
            json.dump(stats.model_dump(), f, indent=2)

        for year in stats.years:
            report = history.year_report(year)
            year_path = os.path.join(settings.OUTPUT_DIR, f"{year}.json")
            with open(year_path, 'w') as f:
                json.dump(report.model_dump(), f, indent=2)

        logger.info(
            f"Reports written to {settings.OUTPUT_DIR}: {stats.total_plays} plays, "
            f"{stats.total_skips} skips over {len(stats.years)} years"
        )

    except Exception as e:
        logger.error(f"Error during listening history processing: {e}")
        traceback.print_exc()
        sys.exit(1)
    finally:
        if history is not None:
            history.close()

if __name__ == "__main__":
    run()
