"""Command line entry point: run a YAML step script in a browser."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

from .adapters.playwright import open_session
from .config.settings import BROWSER_ENGINES, Settings, load_settings
from .core.errors import ScriptFormatError, StepError
from .core.executor.runner import run_script
from .core.ir.codec import load_steps, steps_to_yaml
from .core.validator.validate import find_missing_selectors
from .telemetry import init_telemetry, shutdown_telemetry

logger = logging.getLogger(__name__)


def _positive_seconds(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if not seconds > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return seconds


def build_parser(cfg: Settings) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="stepdriver", description="Run browser automation steps written in YAML"
    )
    ap.add_argument("input_file", help="A file path which contains step commands written in YAML")
    ap.add_argument(
        "--browser-path",
        default=cfg.browser_path,
        help="Path of the browser executable to launch (default: Playwright's bundled build)",
    )
    ap.add_argument(
        "--browser",
        choices=BROWSER_ENGINES,
        default=cfg.browser,
        help=f"Browser engine (default: {cfg.browser})",
    )
    ap.add_argument(
        "--cdp-endpoint",
        default=cfg.cdp_endpoint,
        help="Attach to a running Chromium at this CDP endpoint instead of launching one",
    )
    ap.add_argument(
        "--headed", action="store_true", default=not cfg.headless, help="Show the browser window"
    )
    ap.add_argument(
        "--wait-timeout",
        type=_positive_seconds,
        default=cfg.wait_timeout,
        help=f"Default timeout in seconds for Wait steps (default: {cfg.wait_timeout:g})",
    )
    ap.add_argument("--log-level", default=cfg.log_level, help="Logging level (default: INFO)")
    ap.add_argument(
        "--check",
        action="store_true",
        help="Only parse and validate the script, then print it in normalized form",
    )
    return ap


def _report(message: str) -> None:
    print(f"Error has occurred: {message}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    cfg = load_settings()
    parser = build_parser(cfg)
    args = parser.parse_args(argv)
    if args.browser not in BROWSER_ENGINES:
        parser.error(f"invalid browser {args.browser!r}")

    cfg = replace(
        cfg,
        browser=args.browser,
        browser_path=args.browser_path,
        cdp_endpoint=args.cdp_endpoint,
        headless=not args.headed,
        wait_timeout=args.wait_timeout,
        log_level=args.log_level.upper(),
    )
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        steps = load_steps(args.input_file)
    except (OSError, ScriptFormatError) as e:
        _report(str(e))
        return 1

    issues = find_missing_selectors(steps)
    if issues:
        for issue in issues:
            _report(f"{issue.path}: A {issue.kind} step needs a selector string")
        return 1

    if args.check:
        sys.stdout.write(steps_to_yaml(steps))
        return 0

    init_telemetry()
    try:
        with open_session(cfg) as session:
            run_script(steps, session, wait_timeout=cfg.wait_timeout)
    except StepError as e:
        logger.debug("Run stopped", exc_info=True)
        _report(str(e))
        return 1
    finally:
        shutdown_telemetry()
    return 0


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
