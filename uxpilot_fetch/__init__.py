"""
UXPilot design fetcher.

This package fetches a rendered UXPilot design preview with a headless
browser, computes its layout/style metadata with the external
computeHtmlStyles library, and saves HTML and JSON artifacts.

Run ``uxpilot --help`` for the command-line interface.
"""
