"""
Record types exchanged with the hosted backend
"""
from venered.schemas.auth_schema import AuthContext
from venered.schemas.realtime_schema import ChangeEvent, ChangeEventType
from venered.schemas.message_schema import Message, Conversation
from venered.schemas.notification_schema import Notification, NotificationItem, NotificationType
from venered.schemas.profile_schema import Profile, PrivacySettings
from venered.schemas.post_schema import Post, FeedPost, Comment
from venered.schemas.follow_schema import Follow, Friend, UserRelationship, RelationshipStatus
from venered.schemas.admin_schema import BannedUser, AdminStats

__all__ = [
    'AuthContext',
    'ChangeEvent',
    'ChangeEventType',
    'Message',
    'Conversation',
    'Notification',
    'NotificationItem',
    'NotificationType',
    'Profile',
    'PrivacySettings',
    'Post',
    'FeedPost',
    'Comment',
    'Follow',
    'Friend',
    'UserRelationship',
    'RelationshipStatus',
    'BannedUser',
    'AdminStats',
]
