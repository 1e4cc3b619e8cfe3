"""Backend entrypoint: starts uvicorn with host and port from the environment."""
import os
import uvicorn

# Import the app object directly; uvicorn's string-based import needs src/ on sys.path.
from wealthtrack.main import app


def main() -> None:
    host = os.environ.get("WEALTHTRACK_HOST", "127.0.0.1")
    port = int(os.environ.get("WEALTHTRACK_PORT", "8001"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
