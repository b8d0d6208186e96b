#!/usr/bin/env python3
"""
Secret Scanner CLI
==================
Detect potential secrets (API keys, passwords, private keys) in a file,
in text given on the command line, or in text piped through stdin.
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from secret_scanner import (
    CancellationToken,
    Finding,
    ReadFailureError,
    ScanCancelledError,
    Scanner,
    ScannerError,
    __version__,
    find_likely_secrets,
    load_catalog,
    mask_secret,
)
from secret_scanner.config import settings

logger = logging.getLogger("secret_scan")

# Initialize Rich console
console = Console()
err_console = Console(stderr=True)


class SecretScanCLI:
    """
    Command-line driver: loads the catalog, registers patterns and runs
    batch, streaming or entropy-only scans.
    """

    def __init__(self, patterns_file: Optional[str] = None, workers: Optional[int] = None,
                 entropy_only: bool = False):
        self.patterns_file = patterns_file or settings.PATTERNS_FILE
        self.entropy_only = entropy_only
        self.entropy_threshold = settings.ENTROPY_THRESHOLD
        self.scanner: Optional[Scanner] = None
        self.scan_start_time: Optional[datetime] = None
        self._initialize_scanner(workers)

    def _initialize_scanner(self, workers: Optional[int]):
        """Build the scanner and register the catalog unless entropy-only."""
        catalog = load_catalog(self.patterns_file)
        self.entropy_threshold = catalog.entropy_thresholds.get("api_key", self.entropy_threshold)
        self.scanner = Scanner(workers=workers, descriptions=catalog.descriptions)

        if self.entropy_only:
            logger.info("Entropy-only mode: no patterns registered")
            return

        # Any invalid catalog entry is fatal here
        self.scanner.add_patterns(catalog.all_patterns(), strict=True)
        logger.info(f"Initialized scanner with {len(self.scanner.registry)} patterns from '{self.patterns_file}'")

    async def scan_text(self, text: str, token: CancellationToken) -> List[Finding]:
        """Batch scan of a complete input."""
        self.scan_start_time = datetime.utcnow()
        if self.entropy_only:
            token.raise_if_cancelled()
            return find_likely_secrets(text, self.entropy_threshold)
        return await self.scanner.scan_async(text, token)

    def scan_stream(self, reader, token: CancellationToken) -> List[Finding]:
        """Line-by-line scan; a stream that ended early is reported as an error."""
        self.scan_start_time = datetime.utcnow()
        stream = self.scanner.stream_scan(reader, token)
        findings = list(stream)
        if stream.error is not None:
            logger.error(f"Stream scan ended early after {stream.lines_scanned} lines: {stream.error}")
            if isinstance(stream.error, ScannerError):
                raise stream.error
            raise ScannerError(str(stream.error)) from stream.error
        return findings

    def build_results(self, findings: List[Finding], source: str, verbose: bool = False) -> Dict[str, Any]:
        """Generate the final results structure."""
        scan_duration = (datetime.utcnow() - self.scan_start_time).total_seconds() if self.scan_start_time else 0.0
        findings_data = []
        for finding in findings:
            data = finding.to_dict()
            data["secret_preview"] = finding.value if verbose else mask_secret(finding.value)
            if not verbose:
                del data["value"]
            findings_data.append(data)

        return {
            "scan_metadata": {
                "scanner_version": __version__,
                "scan_timestamp": self.scan_start_time.isoformat() + "Z" if self.scan_start_time else None,
                "source": source,
                "mode": "entropy-only" if self.entropy_only else "patterns",
                "scan_duration_seconds": round(scan_duration, 2),
                "total_findings": len(findings_data),
            },
            "scanner_statistics": self.scanner.get_scan_statistics() if self.scanner else {},
            "findings": findings_data,
        }

    def display_console_results(self, results: Dict[str, Any]):
        """Rich console output."""
        findings_data = results.get("findings", [])
        total = len(findings_data)

        if total == 0:
            console.print(Panel("No secrets detected", style="green", expand=False))
            return

        console.print(Panel(f"Found {total} potential secrets", style="red", expand=False))

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right", width=4)
        table.add_column("Type", style="blue")
        table.add_column("Description")
        table.add_column("Confidence", justify="right")
        table.add_column("Value", style="red")
        table.add_column("Line", justify="right")
        table.add_column("Position", style="dim")

        for i, finding in enumerate(findings_data, 1):
            table.add_row(
                str(i),
                finding["type"],
                finding["description"],
                f"{finding['confidence']:.2f}",
                finding["secret_preview"],
                str(finding["line_number"]),
                f"{finding['start_index']}-{finding['end_index']}",
            )

        console.print(table)


def read_input(args: argparse.Namespace) -> str:
    """Return the text to scan from --file, --text or stdin."""
    if args.file:
        try:
            with open(args.file, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except OSError as e:
            raise ReadFailureError(f"cannot read '{args.file}': {e}") from e
    if args.text is not None:
        return args.text
    try:
        return sys.stdin.read()
    except OSError as e:
        raise ReadFailureError(f"cannot read stdin: {e}") from e


def create_argument_parser() -> argparse.ArgumentParser:
    """Configures the argument parser."""
    parser = argparse.ArgumentParser(
        description=f"Secret Scanner v{__version__}: detect potential secrets in text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan a file
  secret-scan --file config.json

  # Scan text directly
  secret-scan --text "api_key=1234567890abcdef"

  # Scan from stdin, line by line
  cat config.json | secret-scan --stream

  # Use only entropy-based detection
  secret-scan --entropy-only --file config.json
        """)

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--file", help="File to scan for secrets")
    source.add_argument("--text", help="Text to scan for secrets")

    parser.add_argument("--entropy-only", action="store_true", help="Use only entropy-based detection")
    parser.add_argument("--stream", action="store_true", help="Scan line by line instead of all at once")
    parser.add_argument("--workers", type=int, default=settings.SCANNER_WORKERS,
                        help="Concurrent workers for large inputs (default: %(default)s)")
    parser.add_argument("--patterns-file", default=settings.PATTERNS_FILE, help="Path to patterns file")
    parser.add_argument("--timeout", type=float, help="Cancel the scan after this many seconds")
    parser.add_argument("--output-json", action="store_true", help="Output results in JSON format")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show full secret values (use caution)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.stream and args.entropy_only:
        parser.error("--stream cannot be combined with --entropy-only")

    token = CancellationToken()
    if args.timeout:
        token.cancel_after(args.timeout)

    try:
        cli_runner = SecretScanCLI(args.patterns_file, workers=args.workers, entropy_only=args.entropy_only)

        if args.stream:
            if args.file:
                with open(args.file, "r", encoding="utf-8", errors="replace") as f:
                    findings = cli_runner.scan_stream(f, token)
                source = args.file
            elif args.text is not None:
                findings = cli_runner.scan_stream(args.text, token)
                source = "text"
            else:
                findings = cli_runner.scan_stream(sys.stdin, token)
                source = "stdin"
        else:
            text = read_input(args)
            source = args.file or ("text" if args.text is not None else "stdin")
            findings = await cli_runner.scan_text(text, token)

        results = cli_runner.build_results(findings, source, verbose=args.verbose)

        if args.output_json:
            print(json.dumps(results, indent=2))
        else:
            cli_runner.display_console_results(results)

        return 1 if findings else 0

    except KeyboardInterrupt:
        token.cancel()
        err_console.print("\n[yellow]Scan interrupted by user[/yellow]")
        return 130
    except ScanCancelledError:
        err_console.print(f"[red]Error scanning: timed out after {args.timeout}s[/red]")
        return 2
    except (OSError, ReadFailureError) as e:
        err_console.print(f"[red]Error reading input: {e}[/red]")
        return 2
    except ScannerError as e:
        err_console.print(f"[red]Error scanning: {e}[/red]")
        return 2
    except Exception as e:
        logger.exception("CLI execution failed.")
        err_console.print(f"[red]An unexpected error occurred: {e}[/red]")
        return 2


def run() -> None:
    """Console-script entry point."""
    # Configure logging
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
