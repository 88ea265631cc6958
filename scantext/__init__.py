"""scantext: photographed documents to layout-preserving text.

Turns recognizer tokens (or a flat text blob) into text that keeps the
rows and columns of the source image, and tracks each OCR job as an
owner-scoped history record.
"""

__version__ = "1.0.0"
