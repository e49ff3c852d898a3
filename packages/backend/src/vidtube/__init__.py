"""VidTube — video-sharing platform backend.

User accounts, video publishing, comments, likes, subscriptions,
playlists and tweets behind a JSON API. Every mutation on an owned
resource is gated on the caller being its owner.
"""

__version__ = "0.1.0"
