"""Refund request form engine with HTTP and Streamlit front ends."""

__version__ = "0.1.0"
