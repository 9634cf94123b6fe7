"""Messaging-platform integrations."""

from querybot.integrations.mention import MentionEvent, MentionHandler, MentionReply

__all__ = ["MentionEvent", "MentionHandler", "MentionReply"]
