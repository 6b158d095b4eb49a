"""
Data Models
===========

Pydantic data models for conversion requests, render options and results.

Models:
- schemas: conversion, rendering and readiness schemas
"""
