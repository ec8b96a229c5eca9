"""authsite entrypoint.

Run with:
  python -m authsite
"""

import uvicorn

from authsite.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "authsite.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )

if __name__ == "__main__":
    main()
