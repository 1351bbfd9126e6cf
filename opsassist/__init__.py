"""
Restaurant operations assistants.

Tool-calling conversational assistants for staff, shift and table
allocation administration.
"""

__version__ = "0.1.0"
