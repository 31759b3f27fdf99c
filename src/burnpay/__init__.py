"""Off-chain payment channels with a deflationary burn and a price oracle."""

__version__ = "1.0.0"
