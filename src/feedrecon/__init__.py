"""
feedrecon - reconcile a newest-first notification feed with a tabular ledger.

- feedrecon.core: engine (ingestion cursor, completion scanner), ledgers, errors
- feedrecon.framework: event sources and structured logging
- feedrecon.ops: operation entry points with human-readable summaries
- feedrecon.cli: ``feedrecon`` command line
"""

__version__ = "0.1.0"
