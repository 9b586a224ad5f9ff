# src/main.py — v1
"""CLI entry point: generate and regenerate commands.

Usage:
    vidlearn generate <video-url> [options]
    vidlearn regenerate --spec-file <path> [options]

Both commands print a JSON document ``{state, spec, code, error}`` to
stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from vidlearn.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
    except Exception as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vidlearn",
        description=f"vidlearn v{__version__}: interactive learning apps from videos",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--model", default=None,
        help="Model name for both stages (default: LLM_MODEL setting)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- generate ---
    p_generate = subparsers.add_parser(
        "generate", help="Generate a spec and an app from a video URL",
    )
    p_generate.add_argument("url", help="Source video URL")
    p_generate.set_defaults(func=_cmd_generate)

    # --- regenerate ---
    p_regen = subparsers.add_parser(
        "regenerate", help="Generate an app from an edited spec (Stage 2 only)",
    )
    p_regen.add_argument(
        "--spec-file", type=Path, required=True,
        help="Path to a text file holding the spec",
    )
    p_regen.set_defaults(func=_cmd_regenerate)

    return parser


def _load_settings(args: argparse.Namespace):
    from vidlearn.config.settings import load_settings

    overrides: dict[str, object] = {}
    if args.model:
        overrides["llm_model"] = args.model
    return load_settings(**overrides)


def _setup_logging(settings, verbose: bool) -> None:
    from vidlearn.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


def _emit(state) -> int:
    """Print the final state as JSON; exit code 0 only when ready."""
    from vidlearn.orchestrator.state import RunState

    payload = {
        "state": state.kind.value,
        "spec": state.spec,
        "code": state.code,
        "error": state.error,
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if state.kind is RunState.READY else 1


async def _cmd_generate(args: argparse.Namespace, settings) -> int:
    """Run both stages for a video URL."""
    from vidlearn.orchestrator.session import create_session

    session = create_session(settings)
    orchestrator = session.activate(args.url)
    orchestrator.subscribe(
        lambda state: logger.info("State: %s", state.kind.value)
    )
    state = await orchestrator.run()
    if orchestrator.error_hint:
        logger.warning(orchestrator.error_hint)
    return _emit(state)


async def _cmd_regenerate(args: argparse.Namespace, settings) -> int:
    """Run Stage 2 only against a spec read from disk."""
    from vidlearn.orchestrator.session import create_session

    spec_path: Path = args.spec_file
    if not spec_path.exists():
        logger.error("Spec file not found: %s", spec_path)
        return 1
    spec = spec_path.read_text(encoding="utf-8").strip()
    if not spec:
        logger.error("Spec file is empty: %s", spec_path)
        return 1

    session = create_session(settings)
    orchestrator = session.activate(str(spec_path))
    orchestrator.subscribe(
        lambda state: logger.info("State: %s", state.kind.value)
    )
    state = await orchestrator.run_from_spec(spec)
    return _emit(state)


if __name__ == "__main__":
    sys.exit(main())
