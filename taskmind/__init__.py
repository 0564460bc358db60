"""HTTP service that runs translation and summarisation tasks on a chat-completion model."""

__version__ = "0.1.0"
__all__ = ["__version__"]