"""Run the bridge with uvicorn: `python -m call_bridge`."""

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("call_bridge.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
