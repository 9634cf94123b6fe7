"""QueryBot: answer natural-language questions about tabular data with LLM-generated SQL."""

__version__ = "0.1.0"
