"""
Record types for socialdata collections
"""
from socialdata.models.base import Record, TimestampedRecord
from socialdata.models.user import UserProfile, UserSettings
from socialdata.models.post import Post
from socialdata.models.comment import Comment
from socialdata.models.like import Like
from socialdata.models.group import Group, GroupMember
from socialdata.models.event import Event, EventParticipant
from socialdata.models.notification import Notification
from socialdata.models.topic import Topic, TopicFollower
from socialdata.models.message import Message

__all__ = [
    'Record',
    'TimestampedRecord',
    'UserProfile',
    'UserSettings',
    'Post',
    'Comment',
    'Like',
    'Group',
    'GroupMember',
    'Event',
    'EventParticipant',
    'Notification',
    'Topic',
    'TopicFollower',
    'Message',
]
