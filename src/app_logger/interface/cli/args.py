from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema of the maintenance tool: global options
locating the log directory and configuration, and one subcommand per
operation on the local log files.
"""

import argparse
from typing import Dict, List, Optional

from app_logger.domain.constants import APP_VERSION

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the app-logger CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="app-logger",
        description="Inspect, clear and upload local structured log files.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")

    # --- Location and Configuration ---
    p.add_argument(
        "--log-dir",
        dest="log_dir",
        default=None,
        help="Directory holding the log files (defaults to the per-user data dir).",
    )
    p.add_argument(
        "--prefix",
        dest="prefix",
        default=None,
        help="Log file name prefix.",
    )
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="JSON configuration file with logger and upload settings.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # --- files ---
    files_p = sub.add_parser("files", help="List local log files, newest first.")
    files_p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the listing as JSON.",
    )

    # --- show ---
    show_p = sub.add_parser("show", help="Print the entries of a log file.")
    show_p.add_argument(
        "--file",
        dest="file_path",
        default=None,
        help="File to print (defaults to the newest log file).",
    )
    show_p.add_argument(
        "--tail",
        type=int,
        default=None,
        help="Only print the last N lines.",
    )
    show_p.add_argument(
        "--raw",
        action="store_true",
        help="Print the stored JSON lines unformatted.",
    )

    # --- clear ---
    sub.add_parser("clear", help="Delete every local log file.")

    # --- upload ---
    upload_p = sub.add_parser("upload", help="Upload every local log file to a collector.")
    upload_p.add_argument(
        "--endpoint",
        default=None,
        help="Collector URL (falls back to the config file).",
    )
    upload_p.add_argument(
        "--header",
        dest="headers",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra HTTP header; may be repeated.",
    )
    upload_p.add_argument(
        "--as-json",
        dest="as_json",
        action="store_true",
        help="Send all records as one aggregated JSON document.",
    )
    upload_p.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Attempts per file for multipart uploads.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def parse_headers(values: Optional[List[str]]) -> Dict[str, str]:
    """
    Convert repeated KEY=VALUE options into a header mapping.

    Raises:
        ValueError: If an item has no '=' or an empty key.
    """
    headers: Dict[str, str] = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid header '{item}', expected KEY=VALUE")
        headers[key] = value.strip()
    return headers
