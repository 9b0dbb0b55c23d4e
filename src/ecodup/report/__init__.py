"""Scan results and their presentation.

This package contains:
- records: Result records (file groups, duplicated directories, scan result) and their msgpack encoding
- store: ReportStore and ReportManifest for saving results to report directories
- path: Default report locations
- table: Console tables
"""
