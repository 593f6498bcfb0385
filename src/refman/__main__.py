"""refman entrypoint.

Run with:
  python -m refman
"""

import os
import uvicorn

from refman.core.log import setup_logging

def main() -> None:
    host = os.getenv("REFMAN_HOST", "0.0.0.0")
    port = int(os.getenv("REFMAN_PORT", "8000"))
    reload = os.getenv("REFMAN_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    setup_logging()
    uvicorn.run("refman.app:app", host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
