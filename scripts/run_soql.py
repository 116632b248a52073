#!/usr/bin/env python3
"""
Run a SOQL query against the configured Salesforce org and print the records
as JSON.

Credentials come from SF_* environment variables (or .env), or from a YAML
file passed with --config.

Examples:
    python scripts/run_soql.py "SELECT Id,Name FROM Campaign ORDER BY Name ASC"
    python scripts/run_soql.py --all "SELECT Id,Name FROM Account"
    python scripts/run_soql.py --describe Opportunity
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from crm_bridge.database.redis import RedisCache
from crm_bridge.integrations.salesforce.service import SalesforceService
from crm_bridge.utils.config_loader import config_from_env, load_salesforce_config
from crm_bridge.utils.logging_setup import setup_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Run a SOQL query against Salesforce")
    parser.add_argument("query", nargs="?", help="SOQL statement")
    parser.add_argument("--all", action="store_true", help="Follow nextRecordsUrl and print every page")
    parser.add_argument("--describe", metavar="SOBJECT", help="Print the picklists of an sObject instead")
    parser.add_argument("--config", type=Path, help="YAML config file (default: SF_* environment variables)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)

    if not args.query and not args.describe:
        parser.error("a query or --describe is required")

    cfg = load_salesforce_config(args.config) if args.config else config_from_env()
    service = SalesforceService(cfg, RedisCache())
    if not service.token_exists():
        print("Could not authenticate with Salesforce; check SF_* settings.", file=sys.stderr)
        return 1

    if args.describe:
        result = service.get_picklists(args.describe)
    elif args.all:
        result = service.query_all(args.query)
    else:
        result = service.run_query(args.query)

    if not result:
        print("No results (the query failed or matched nothing).", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
