"""Assistant module.

This module provides the patient question-answering strategy interface and
its keyword-template implementation.
"""

from .responder import AssistantContext, KeywordResponder, Responder

__all__ = ["AssistantContext", "KeywordResponder", "Responder"]
