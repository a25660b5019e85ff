"""Serve the loteamentos API with uvicorn (`python -m loteamentos`).

LOT_HOST / LOT_PORT pick the bind address; LOT_RELOAD=1 enables auto-reload
for local development.
"""

import os

import uvicorn


def main() -> None:
    reload = os.getenv("LOT_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run(
        "loteamentos.app:app",
        host=os.getenv("LOT_HOST", "127.0.0.1"),
        port=int(os.getenv("LOT_PORT", "8000")),
        reload=reload,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
