import argparse

import uvicorn

from .config import get_settings
from .main import create_app


def parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Grinder telemetry relay")
    parser.add_argument("--host", type=str, default=settings.host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.port, help="Listen port (PORT)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    # Build FastAPI app from environment settings
    app = create_app()

    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
    )


if __name__ == "__main__":
    main()
