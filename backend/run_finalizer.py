"""Run the contest finalizer as a standalone process."""

import logging
import time

from contestjudge.config import settings
from contestjudge.core.database import init_db
from contestjudge.services.finalizer_worker import finalizer_worker


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    init_db()
    finalizer_worker.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        finalizer_worker.stop()


if __name__ == "__main__":
    main()
