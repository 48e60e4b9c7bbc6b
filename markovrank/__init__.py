"""Node importance scores from the stationary distribution of a graph walk."""

from typing import Any

__all__ = ["pagerank"]


async def pagerank(*args: Any, **kwargs: Any):
    from .analysis.pagerank import pagerank as _pagerank

    return await _pagerank(*args, **kwargs)
