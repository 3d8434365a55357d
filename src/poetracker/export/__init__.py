"""
Export Module

Portfolio of Evidence assembly and PDF rendering.
"""

from .portfolio import PdfPortfolioRenderer, PortfolioBuilder, PortfolioDocument

__all__ = ["PdfPortfolioRenderer", "PortfolioBuilder", "PortfolioDocument"]
