"""
Start the analytics API with uvicorn.

    python scripts/run_server.py --port 8080 --reload

Without OPENAI_API_KEY in the environment (or .env), reports are written
by the mock LLM client.
"""

import argparse
import logging

import uvicorn


LOG_LEVELS = ["critical", "error", "warning", "info", "debug"]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve fin_analytics.api:app")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    parser.add_argument("--log-level", default="info", choices=LOG_LEVELS)
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger = logging.getLogger("run_server")

    logger.info(f"Serving on http://{args.host}:{args.port} (docs at /docs)")

    uvicorn.run(
        "fin_analytics.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
