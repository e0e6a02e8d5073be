"""
SDK for AI Cost Estimator.

Prices live calls to a generative API.
"""

from .openai_client import LiveEstimate, MeteredClient

__all__ = ["LiveEstimate", "MeteredClient"]
