"""
Command Line Interface Package

Command-line access to the persisted ledger.

Command Structure:
- ledger: Main entry point with utility commands (version, config)
- ledger show / dispatch / recalc: inspect and change the ledger
- ledger export / import: envelope-based backup and restore
- ledger cycles / summary: billing-cycle reports
"""
