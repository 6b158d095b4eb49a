"""
Document Module
===============

Markdown parsing and HTML document assembly.

Components:
- parser: front matter extraction and markdown-it tokenization
- assembler: placeholder substitution and themed container rendering
- templates: Jinja2 document template and theme stylesheet
"""
