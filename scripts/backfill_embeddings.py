#!/usr/bin/env python3
"""
Backfill Embeddings Script

Re-runs enrichment for every note that has content but no usable
embedding: notes saved while OPENAI_API_KEY was unset, and notes whose
stored vector came from a model with a different dimensionality.

Usage:
    $ OPENAI_API_KEY=sk-... python scripts/backfill_embeddings.py
"""

import asyncio
import logging
import os
import sys

# Required for direct script execution without package installation
sys.path.append(os.path.join(os.path.dirname(__file__), "../src"))

from mindpad.core.config import settings  # noqa: E402
from mindpad.core.database import build_engine, build_session_factory, init_db  # noqa: E402
from mindpad.core.logging import setup_logging  # noqa: E402
from mindpad.services.container import build_services  # noqa: E402

logger = logging.getLogger("mindpad.scripts.backfill")


async def main() -> int:
    """
    Schedule enrichment for notes lacking embeddings and wait for it.

    Returns:
        Process exit code (1 when enrichment is not configured).
    """
    setup_logging()
    if not settings.provider_configured:
        logger.error("OPENAI_API_KEY is not set, nothing to backfill with")
        return 1

    engine = build_engine()
    await init_db(engine)
    services = build_services(build_session_factory(engine))

    try:
        scheduled = await services.notes.reenrich_missing()
        await services.pipeline.wait_idle()
        logger.info("Backfill finished for %d notes", len(scheduled))
    finally:
        await services.aclose()
        await engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
