"""
TokenLens - Main Entry Point
Runs the HTTP API, or a single analysis from the command line.

    python main.py                          # serve the API
    python main.py analyze <token> [--mode rules|consensus]
"""
import argparse
import asyncio
import json
import sys

import uvicorn
from tokenlens.config.settings import get_settings
from tokenlens.engines.analysis_engine import ANALYSIS_MODES, InvalidTokenInput, TokenAnalysisEngine
from tokenlens.utils.logger import setup_logging, get_logger

logger = get_logger("main")


def run_api():
    """Run the FastAPI application."""
    settings = get_settings()
    setup_logging()
    logger.info("starting_tokenlens", version=settings.version, port=settings.port)
    uvicorn.run(
        "tokenlens.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


async def run_analysis(token: str, mode: str = None) -> dict:
    """Run one analysis and return the formatted result."""
    engine = TokenAnalysisEngine()
    await engine.initialize()
    try:
        result = await engine.analyze(token, mode)
        return result.to_dict()
    finally:
        await engine.shutdown()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tokenlens", description="Token data reconciliation and risk scoring")
    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Analyze one token and print the result as JSON")
    analyze.add_argument("token", help="Contract address or trading symbol")
    analyze.add_argument("--mode", choices=ANALYSIS_MODES, default=None)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.command != "analyze":
        run_api()
        return 0

    setup_logging()
    try:
        output = asyncio.run(run_analysis(args.token, args.mode))
    except InvalidTokenInput as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
