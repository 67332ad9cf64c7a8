"""FlowQL: checks whether hosted LLMs cite a business when asked about its market."""

__version__ = "0.1.0"
