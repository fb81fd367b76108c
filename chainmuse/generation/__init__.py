"""Narrative text generation package."""

from chainmuse.generation.generator import Generator, LangChainGenerator, SimulatedGenerator

__all__ = ["Generator", "LangChainGenerator", "SimulatedGenerator"]
