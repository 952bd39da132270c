"""Overlay node building blocks: topology state, UDP registry exchanges and TCP neighbour messages."""

__version__ = "0.1.0"