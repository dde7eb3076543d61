"""
Development Server Entry Point
==============================

Usage:
    python run.py              # Development mode with reload
    python run.py --no-reload  # Development mode without reload
"""

import argparse

import uvicorn

from portal.core.config import settings


def main():
    """Run the development server."""
    parser = argparse.ArgumentParser(description=f"Run the {settings.APP_NAME} development server")
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)",
    )
    args = parser.parse_args()

    print(f"\n{'='*50}")
    print(f"  {settings.APP_NAME} v{settings.APP_VERSION}")
    print(f"  Environment: {settings.ENVIRONMENT}")
    print(f"{'='*50}\n")
    print(f"Server: http://{args.host}:{args.port}")
    print("Press CTRL+C to stop\n")

    uvicorn.run(
        "portal.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
