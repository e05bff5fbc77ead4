"""
Serving — FastAPI application for uploads, workspace management and
context retrieval.
"""
