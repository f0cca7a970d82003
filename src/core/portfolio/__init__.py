from src.core.portfolio.classification import classify_category
from src.core.portfolio.service import PortfolioAnalysisService

__all__ = ["PortfolioAnalysisService", "classify_category"]
