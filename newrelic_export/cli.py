"""
New Relic Export - Command Line Interface

Usage:
    # Using environment / .env.newrelic configuration:
    newrelic-export

    # With command-line arguments:
    newrelic-export --account-id 1234567 --user-key NRAK-... --output-dir exports

    # One row per dashboard instead of one per NRQL query:
    newrelic-export --mode summary

Configuration:
    Set in the environment or a .env.newrelic file:
        NEW_RELIC_ACCOUNT=1234567
        NEW_RELIC_USER_KEY=NRAK-...
        NEW_RELIC_GRAPHQL_URL=https://api.newrelic.com/graphql  # Optional
        MAX_WORKERS=10                                         # Optional
        REQUEST_TIMEOUT=30                                     # Optional
        RUN_TIMEOUT=1800                                       # Optional
        EXPORT_MODE=pages                                      # Optional
        DEBUG=false                                            # Optional
"""

import argparse

from newrelic_export.common import ConfigError, configure_logging, mask_secret
from newrelic_export.config import ExportConfig
from newrelic_export.constants import EXPORT_MODES
from newrelic_export.export import export_all_dashboards


def _create_parser():
    """Create and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="newrelic-export",
        description="Export New Relic dashboard NRQL queries to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Basic export using .env.newrelic:
  newrelic-export

  # One row per dashboard:
  newrelic-export --mode summary

  # More parallel detail requests:
  newrelic-export --max-workers 16

  # Debug mode:
  newrelic-export --debug
        """,
    )
    parser.add_argument(
        "--account-id", type=str, help="Account ID to export (env: NEW_RELIC_ACCOUNT)"
    )
    parser.add_argument(
        "--user-key", type=str, help="User API key (env: NEW_RELIC_USER_KEY)"
    )
    parser.add_argument(
        "--graphql-url", type=str, help="NerdGraph endpoint (env: NEW_RELIC_GRAPHQL_URL)"
    )
    parser.add_argument(
        "--mode",
        choices=EXPORT_MODES,
        help="pages: one row per NRQL query, summary: one row per dashboard (env: EXPORT_MODE)",
    )
    parser.add_argument(
        "--output-dir", type=str, help="Directory for the CSV file (env: OUTPUT_DIR)"
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        help="Parallel dashboard detail requestors - default: 10 (env: MAX_WORKERS)",
    )
    parser.add_argument(
        "--request-timeout",
        type=float,
        help="Per-request timeout in seconds - default: 30 (env: REQUEST_TIMEOUT)",
    )
    parser.add_argument(
        "--run-timeout",
        type=float,
        help="Deadline for the whole run in seconds, 0 disables - default: 1800 (env: RUN_TIMEOUT)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging (env: DEBUG)"
    )
    return parser


def _build_config(args):
    return ExportConfig(
        account_id=args.account_id,
        user_key=args.user_key,
        graphql_url=args.graphql_url,
        max_workers=args.max_workers,
        request_timeout=args.request_timeout,
        run_timeout=args.run_timeout,
        export_mode=args.mode,
        output_dir=args.output_dir,
        debug=True if args.debug else None,
        load_from_env=True,
    )


def run_export_command(args):
    """Run export command."""
    print("=" * 70)
    print("New Relic Dashboard Export")
    print("=" * 70)

    try:
        config = _build_config(args).validate()
    except ConfigError as e:
        print(f"\nError: {e}")
        print("\nRequired configuration:")
        print("  - NEW_RELIC_ACCOUNT (or --account-id), an integer")
        print("  - NEW_RELIC_USER_KEY (or --user-key)")
        print("\nFor help: newrelic-export --help")
        return 1

    configure_logging(debug=config.DEBUG)

    # Display configuration
    print("\nConfiguration:")
    print(f"   Account ID: {config.ACCOUNT_ID}")
    print(f"   User Key: {mask_secret(config.USER_KEY)}")
    print(f"   Endpoint: {config.GRAPHQL_URL}")
    print(f"   Export Mode: {config.EXPORT_MODE}")
    print(f"   Output Directory: {config.OUTPUT_DIR}")
    print(f"   Max Workers: {config.MAX_WORKERS}")
    print(f"   Request Timeout: {config.REQUEST_TIMEOUT:g}s")
    print(
        f"   Run Timeout: {f'{config.RUN_TIMEOUT:g}s' if config.RUN_TIMEOUT else 'Disabled'}"
    )
    print(f"   Debug Mode: {'Enabled' if config.DEBUG else 'Disabled'}")
    print()

    try:
        result = export_all_dashboards(config)

        print("\n" + "=" * 70)
        print("Export Completed Successfully!")
        print("=" * 70)
        print("\nResults:")
        if result["mode"] == "pages":
            print(f"   Dashboards: {result['parent_count']}")
            print(f"   Dashboard Pages: {result['dashboard_count']}")
            print(f"   Widgets Found: {result['widget_count']}")
        else:
            print(f"   Dashboards: {result['dashboard_count']}")
        print(f"   CSV Rows: {result['row_count']}")
        print(f"   CSV File: {result['csv_path']}")
        print("\n" + "=" * 70)
        return 0

    except Exception as e:
        print("\n" + "=" * 70)
        print("Export Failed!")
        print("=" * 70)
        print(f"\nError: {str(e)}")

        if config.DEBUG:
            import traceback

            print("\nFull traceback:")
            traceback.print_exc()
        else:
            print("\nRun with --debug flag for detailed error information.")

        print("\n" + "=" * 70)
        return 1


def main(argv=None):
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])
    """
    parser = _create_parser()
    args = parser.parse_args(argv)
    return run_export_command(args)
