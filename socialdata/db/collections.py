"""
Collection names shared with every client of the store
"""
USER_PROFILES = "userProfiles"
USER_SETTINGS = "userSettings"
POSTS = "posts"
COMMENTS = "comments"
LIKES = "likes"
GROUPS = "groups"
GROUP_MEMBERS = "groupMembers"
EVENTS = "events"
EVENT_PARTICIPANTS = "eventParticipants"
NOTIFICATIONS = "notifications"
TOPICS = "topics"
TOPIC_FOLLOWERS = "topicFollowers"
MESSAGES = "messages"
ACCOUNTS = "accounts"
