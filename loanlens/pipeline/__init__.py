"""
LoanLens pipeline package
"""

from .orchestrator import RecommendationPipeline

__all__ = ["RecommendationPipeline"]
