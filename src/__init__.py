"""Visa Document Intake System.

OCR-driven intake pipeline for visa applications: Tesseract text
extraction, per-document field parsers, a precedence-based merge of
extracted data, and a deterministic approval-likelihood score.
"""
