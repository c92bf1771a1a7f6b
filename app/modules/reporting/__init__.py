from .domain.aggregator import SpendAggregator

__all__ = ["SpendAggregator"]
