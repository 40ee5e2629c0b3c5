"""A small Minecraft server core: protocol buffers, per-client connection state, packet handlers and a tick-driven server."""

__version__ = "0.1.0"