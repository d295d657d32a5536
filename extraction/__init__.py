"""Complaint extraction and Form Interrogatories checkbox analysis.

Usage:
    from extraction import ComplaintExtractor

    extractor = ComplaintExtractor(llm)
    outcome = await extractor.extract_from_file(pdf_bytes, "application/pdf")
    info = await analyze_checkboxes_for_form_interrogatories(llm, outcome.complaint)
"""

from extraction.checkboxes import (
    analyze_checkboxes_for_form_interrogatories,
    fallback_checkbox_analysis,
    merge_checkbox_analysis,
)
from extraction.complaint import ComplaintExtractor, mock_complaint_information

__all__ = [
    "ComplaintExtractor",
    "analyze_checkboxes_for_form_interrogatories",
    "fallback_checkbox_analysis",
    "merge_checkbox_analysis",
    "mock_complaint_information",
]
