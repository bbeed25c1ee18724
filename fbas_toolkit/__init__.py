"""Reading, grouping, graph building and growth simulation for federated byzantine agreement systems."""

__version__ = "0.7.4"