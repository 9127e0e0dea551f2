"""
Text handling: documents and the cleaning pipeline.
"""

from textmap.text.cleaning import (
    Document, DropStep, build_pipeline, clean_documents, clean_text, regex_drop
)
