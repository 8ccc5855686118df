"""
Run the Helpdesk API with uvicorn.

Usage:
    python run.py                # HOST/PORT from the environment (default 0.0.0.0:3000)
    python run.py --reload       # Development mode with auto-reload
    python run.py --port 8080
"""
import argparse
import uvicorn

from helpdesk.config.settings import get_settings


def parse_args(settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Helpdesk API server")
    parser.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port, help=f"Listen port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument(
        "--workers", type=int, default=1,
        help="Worker processes; ignored with --reload. Keep RETENTION_SCHEDULE_ENABLED off when > 1."
    )
    return parser.parse_args()


def main():
    settings = get_settings()
    args = parse_args(settings)
    workers = 1 if args.reload else args.workers

    print(f"Helpdesk API on {args.host}:{args.port} (env={settings.environment}, workers={workers})")

    uvicorn.run(
        "helpdesk.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=workers
    )


if __name__ == "__main__":
    main()
