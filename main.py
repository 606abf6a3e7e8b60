#!/usr/bin/env python3
"""
Invoice Field Extraction System - Main Entry Point.

Command-line interface and programmatic access to the extraction
pipeline: invoices (PDF or image) go in, one outcome per invoice comes
out, and successful records are logged to the invoice workbook.

Usage:
    Command Line:
        python main.py --input invoice.pdf
        python main.py --input ./invoices/ --workbook outputs/invoices.xlsx --json
        python main.py --report --report-date 2026-01-12

    Python:
        from main import run_extraction
        outcomes = run_extraction("invoice.pdf", store=False)

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager
from invoice_extraction.utils.logger import setup_logger_from_config, get_logger
from invoice_extraction.utils.exceptions import InvoiceExtractionError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice Field Extraction System",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process single invoice:
        python main.py --input invoice.pdf

    Process directory without logging to the workbook:
        python main.py --input ./invoices/ --no-store --json

    Daily report for yesterday (IST):
        python main.py --report
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        default=None,
        help="Input file or directory containing invoices"
    )

    parser.add_argument(
        "--workbook", "-w",
        type=str,
        default=None,
        help="Invoice workbook file (default: outputs/invoices.xlsx)"
    )

    parser.add_argument(
        "--no-store",
        action="store_true",
        help="Do not log successful invoices to the workbook"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print outcomes as JSON"
    )

    # Report options
    parser.add_argument(
        "--report",
        action="store_true",
        help="Write the daily CSV report instead of processing invoices"
    )

    parser.add_argument(
        "--report-date",
        type=date.fromisoformat,
        default=None,
        help="Day to report, YYYY-MM-DD (default: yesterday)"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    args = parser.parse_args(argv)
    if not args.report and not args.input:
        parser.error("--input is required unless --report is given")
    return args


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize the extraction system with configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config()

    if args.debug:
        logger.setLevel(logging.DEBUG)
        for handler in logger.handlers:
            handler.setLevel(logging.DEBUG)
    elif args.quiet:
        logger.setLevel(logging.WARNING)

    logger.info("=" * 60)
    logger.info("INVOICE FIELD EXTRACTION SYSTEM")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")

    return config


def run_extraction(
    input_path: str,
    workbook_path: Optional[str] = None,
    config_path: Optional[str] = None,
    store: bool = True
) -> list:
    """
    Run the invoice extraction pipeline.

    Args:
        input_path: Path to input file or directory.
        workbook_path: Invoice workbook file (default from config).
        config_path: Optional custom configuration file path.
        store: Whether to log successful invoices to the workbook.

    Returns:
        List of ExtractionOutcome objects, one per invoice.

    Example:
        >>> outcomes = run_extraction("invoices/", store=False)
        >>> for outcome in outcomes:
        ...     print(outcome)
    """
    logger = get_logger(__name__)

    ConfigurationManager(config_path)

    from invoice_extraction.processor import InvoiceProcessor
    from invoice_extraction.output_handler import OutputHandler

    logger.info("Initializing pipeline components...")
    processor = InvoiceProcessor()

    input_p = Path(input_path)
    if input_p.is_dir():
        outcomes = processor.process_directory(input_p)
    else:
        outcomes = [processor.process_file(input_p)]

    if store and any(outcome.success for outcome in outcomes):
        output_handler = OutputHandler(workbook_path=workbook_path, workbook_enabled=True)
        output_info = output_handler.save(outcomes)
        logger.info(
            f"Workbook: {output_info['logged']} logged, "
            f"{output_info['skipped']} skipped ({output_info['workbook_path']})"
        )

    return outcomes


def print_outcomes(outcomes: list, as_json: bool) -> None:
    """Print one line (or one JSON document) per outcome."""
    if as_json:
        import json
        print(json.dumps([outcome.to_dict() for outcome in outcomes], indent=2, ensure_ascii=False))
        return

    for outcome in outcomes:
        label = outcome.source or "input"
        if outcome.success:
            record = outcome.record
            print(
                f"OK    {label}: {record.order_id} | {record.date} | {record.price} | "
                f"{record.item_name} | {record.delivery_state}"
            )
        else:
            print(f"FAIL  {label}: {outcome.reason} - {outcome.message}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 when every invoice succeeded, 1 otherwise).
    """
    try:
        args = parse_arguments(argv)

        initialize_system(args)
        logger = get_logger(__name__)

        if args.report:
            from invoice_extraction.output_handler import OutputHandler

            path = OutputHandler(workbook_path=args.workbook).daily_report(args.report_date)
            if path is None:
                print("No invoices logged for the report day.")
            else:
                print(f"Report written: {path}")
            return 0

        outcomes = run_extraction(
            input_path=args.input,
            workbook_path=args.workbook,
            config_path=args.config,
            store=not args.no_store
        )

        if not outcomes:
            logger.error("No files to process")
            return 1

        print_outcomes(outcomes, args.json)

        failed = sum(1 for outcome in outcomes if not outcome.success)
        logger.info("=" * 60)
        logger.info(f"Extraction complete. {len(outcomes) - failed}/{len(outcomes)} invoices extracted.")
        logger.info("=" * 60)

        return 0 if failed == 0 else 1

    except InvoiceExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
