"""
Rendering Module
===============

Browser automation for PDF generation.

Components:
- runtime: per-conversion Playwright runtime acquisition and release
- readiness: bounded waits for fonts, diagrams and charts
- orchestrator: drives a runtime from load to a settled visual state
- capture: prints the settled page to PDF
"""
