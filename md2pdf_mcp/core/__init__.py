"""
Core Business Logic
==================

Content resolution, document assembly, rendering orchestration and PDF capture.
"""
