"""LandChain land registry backend."""
