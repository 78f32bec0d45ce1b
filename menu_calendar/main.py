#!/usr/bin/env python3
"""
School Meal Menu Viewer
Looks up a day's school meal menu from the NEIS open API and renders it
"""

import os
import sys
import argparse
import time
import traceback
from datetime import date
from pathlib import Path
from typing import Optional

from menu_calendar.controller import STATUS_ERROR, MealMenuController
from menu_calendar.query import PROXY_BASE
from menu_calendar.renderer import CompositeDisplay, HtmlPageDisplay, TerminalDisplay


OUTPUT_FORMATS = ('text', 'html', 'both')


def load_settings(timeout_arg: Optional[float] = None) -> dict:
    """
    Read proxy and timeout settings from the environment

    Args:
        timeout_arg: Timeout from the command line, takes precedence

    Returns:
        Dict with 'proxy_base' and 'timeout'

    Raises:
        ValueError: If MEAL_REQUEST_TIMEOUT is not a positive number
    """
    proxy_base = os.environ.get('MEAL_PROXY_BASE') or PROXY_BASE

    timeout = timeout_arg
    if timeout is None:
        raw_timeout = os.environ.get('MEAL_REQUEST_TIMEOUT')
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(f"MEAL_REQUEST_TIMEOUT must be a number of seconds, got '{raw_timeout}'")

    if timeout is not None and timeout <= 0:
        raise ValueError(f"Request timeout must be positive, got {timeout}")

    return {'proxy_base': proxy_base, 'timeout': timeout}


def build_display(output_format: str, output_dir: Path, date_value: str):
    """Pick the display(s) for the requested output format"""
    displays = []
    if output_format in ('text', 'both'):
        displays.append(TerminalDisplay())
    if output_format in ('html', 'both'):
        displays.append(HtmlPageDisplay(output_dir / 'meal.html', date_value=date_value))

    if len(displays) == 1:
        return displays[0]
    return CompositeDisplay(*displays)


def run(date_value: str, output_format: str = 'text', output_dir: Path = Path('output'),
        timeout: Optional[float] = None) -> int:
    """
    Look up and render the menu for one date

    Returns:
        Exit code (0 for success or no data, non-zero for failure)
    """
    try:
        settings = load_settings(timeout)
        display = build_display(output_format, output_dir, date_value)
        controller = MealMenuController(
            display,
            proxy_base=settings['proxy_base'],
            timeout=settings['timeout'],
        )

        print(f"Looking up meal menu for {date_value or '(no date)'}...")
        start_time = time.time()
        outcome = controller.search(date_value)
        elapsed = time.time() - start_time
        print(f"  ⏱️  Lookup took {elapsed:.2f}s")

        if outcome is None or outcome.status == STATUS_ERROR:
            return 1

        if output_format in ('html', 'both'):
            print(f"HTML saved to {output_dir / 'meal.html'}")

        return 0

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130
    except ValueError as e:
        print(f"\n\nConfiguration Error: {e}")
        return 1
    except Exception as e:
        print(f"\n\nError: {e}")
        traceback.print_exc()
        return 1


def main():
    """Entry point for the meal menu viewer"""
    parser = argparse.ArgumentParser(description='Show the school meal menu for a day')
    parser.add_argument('--date', type=str, default=date.today().isoformat(),
                        help='Date to look up, YYYY-MM-DD (default: today)')
    parser.add_argument('--format', type=str, choices=OUTPUT_FORMATS, default='text',
                        help='Output format (default: text)')
    parser.add_argument('--output', type=str, default='output',
                        help='Output directory for HTML (default: output)')
    parser.add_argument('--timeout', type=float, default=None,
                        help='Request timeout in seconds (default: wait indefinitely)')
    args = parser.parse_args()

    return run(args.date, args.format, Path(args.output), args.timeout)


if __name__ == "__main__":
    sys.exit(main())
