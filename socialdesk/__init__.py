"""SocialDesk: content approval and scheduling API for multi-brand social accounts."""
__version__ = "1.0.0"
