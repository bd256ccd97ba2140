"""Single-threaded TCP and UDP servers: group chat, remote command shell, e-mail address generator and UDP chat."""

__version__ = "0.1.0"
__all__ = ["__version__"]