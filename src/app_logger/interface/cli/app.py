from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the maintenance tool lifecycle: logging bootstrap, loading
of the optional configuration file, dispatch of the selected subcommand
and rendering of its result. Operates on the log files a LoggerService
has written, without producing log entries itself.
"""

import json
import os
import sys
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from app_logger.core.services.uploader import LogUploader
from app_logger.domain.config import LoggerConfig, LogUploadConfig, load_logger_config
from app_logger.domain.log_entry import LogEntry
from app_logger.domain.upload_models import LogUploadResult
from app_logger.infra.fs import list_log_files, resolve_log_dir, tail_lines
from app_logger.infra.logging import LoggingConfig, configure_logging, get_logger
from app_logger.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 for success, 1 for failure).
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.debug else "WARNING"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=None))

    cfg = _load_config(args.config_path)
    if cfg is None:
        return 1

    log_dir = resolve_log_dir(args.log_dir or cfg.log_dir)
    prefix = args.prefix or cfg.log_file_name_prefix
    logger.debug(f"Using log directory {log_dir} (prefix '{prefix}')")

    try:
        if args.command == "files":
            return _cmd_files(log_dir, json_output=args.json_output)
        if args.command == "show":
            return _cmd_show(log_dir, prefix, args.file_path, args.tail, args.raw)
        if args.command == "clear":
            return _cmd_clear(log_dir)
        if args.command == "upload":
            return _cmd_upload(log_dir, cfg, args)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except OSError as e:
        logger.error(f"File system error: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


def _load_config(path: Optional[str]) -> Optional[LoggerConfig]:
    if not path:
        return LoggerConfig()
    if not os.path.isfile(path):
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        return None

    cfg, warnings = load_logger_config(path)
    for w in warnings:
        print(f"WARNING: {w}", file=sys.stderr)
    return cfg

# -----------------------------------------------------------------------------
# SUBCOMMANDS
# -----------------------------------------------------------------------------

def _cmd_files(log_dir: str, json_output: bool = False) -> int:
    files = list_log_files(log_dir)
    rows: List[Dict[str, Any]] = []
    for path in files:
        st = os.stat(path)
        rows.append({
            "path": path,
            "size": st.st_size,
            "modified": datetime.fromtimestamp(st.st_mtime).isoformat(timespec="seconds"),
        })

    if json_output:
        print(json.dumps(rows, ensure_ascii=False, indent=2))
        return 0

    if not rows:
        print(f"No log files in {log_dir}")
        return 0

    for row in rows:
        print(f"{row['size']:>12,}  {row['modified']}  {os.path.basename(row['path'])}")
    return 0


def _cmd_show(
        log_dir: str,
        prefix: str,
        file_path: Optional[str],
        tail: Optional[int],
        raw: bool,
) -> int:
    path = file_path or _newest_with_prefix(log_dir, prefix)
    if not path or not os.path.isfile(path):
        print(f"ERROR: No log file to show ({path or log_dir})", file=sys.stderr)
        return 1

    if tail is not None:
        lines = tail_lines(path, tail)
    else:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()

    malformed = 0
    for line in lines:
        if not line.strip():
            continue
        if raw:
            print(line)
            continue
        try:
            print(LogEntry.from_json_line(line).to_formatted_string(), end="")
        except ValueError:
            malformed += 1

    if malformed:
        logger.warning(f"Skipped {malformed} malformed line(s) in {path}")
    return 0


def _cmd_clear(log_dir: str) -> int:
    files = list_log_files(log_dir)
    for path in files:
        os.remove(path)
    print(f"Deleted {len(files)} log file(s) from {log_dir}")
    return 0


def _cmd_upload(log_dir: str, cfg: LoggerConfig, args: Any) -> int:
    try:
        upload_cfg = _resolve_upload_config(cfg, args)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    files = list_log_files(log_dir)
    if not files:
        print("No log files to upload")
        return 0

    uploader = LogUploader(upload_cfg)
    if args.as_json:
        result = uploader.upload_as_json(files)
    else:
        result = uploader.upload_log_files(files)

    _print_upload_result(result)
    return 0 if result.success else 1


def _resolve_upload_config(cfg: LoggerConfig, args: Any) -> LogUploadConfig:
    """
    Merge CLI upload options over the `upload` section of the config file.

    Raises:
        ValueError: If no endpoint is available or a header is malformed.
    """
    base = cfg.upload_config
    endpoint = args.endpoint or (base.endpoint if base else None)
    if not endpoint:
        raise ValueError("No upload endpoint given (use --endpoint or the config 'upload' section)")

    headers: Dict[str, str] = dict(base.headers) if base and base.headers else {}
    headers.update(cli_args.parse_headers(args.headers))

    if base is None:
        base = LogUploadConfig(endpoint=endpoint)
    retries = args.retries if args.retries is not None else base.max_retries

    return replace(
        base,
        endpoint=endpoint,
        headers=headers or None,
        max_retries=max(1, retries),
    )

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _print_upload_result(result: LogUploadResult) -> None:
    stream = sys.stdout if result.success else sys.stderr
    status = "OK" if result.success else "ERROR"
    print(f"{status}: {result.message}", file=stream)
    print(f"Files uploaded: {result.files_uploaded}/{result.total_files}", file=stream)
    for failure in result.failures:
        print(f"  - {failure}", file=stream)


def _newest_with_prefix(log_dir: str, prefix: str) -> Optional[str]:
    for path in list_log_files(log_dir):
        if os.path.basename(path).startswith(prefix):
            return path
    return None


if __name__ == "__main__":
    sys.exit(main())
