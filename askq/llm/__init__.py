"""Gemini generation client."""
