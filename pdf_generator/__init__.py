"""
PDF Generator - renders web pages to PDF on demand.

Validates the target URL, injects caller data into the page, renders it
with Playwright/Chromium, optionally password-protects the result, stores
it in S3 and reports a cost estimate.
"""

__version__ = "0.1.0"
