"""
Deck asset API package.

A thin FastAPI service that proxies deck and asset records to a managed
database plus an S3-compatible storage bucket. All persistent state lives in
the backend; the process only holds the client handles.
"""

__version__ = "0.1.0"
