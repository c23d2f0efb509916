"""Enumerations stored in Supabase columns."""

RSVP_ATTENDING = "Attending"
RSVP_DECLINED = "Declined"
RSVP_MAYBE = "Maybe"
RSVP_PENDING = "Pending"
RSVP_STATUSES = (RSVP_ATTENDING, RSVP_DECLINED, RSVP_MAYBE, RSVP_PENDING)

MESSAGE_TYPE_CHANNEL = "channel"
MESSAGE_TYPE_ANNOUNCEMENT = "announcement"
MESSAGE_TYPE_DIRECT = "direct"
MESSAGE_TYPES = (MESSAGE_TYPE_CHANNEL, MESSAGE_TYPE_ANNOUNCEMENT, MESSAGE_TYPE_DIRECT)

MEDIA_TYPE_IMAGE = "image"
MEDIA_TYPE_VIDEO = "video"
ACCEPTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
ACCEPTED_VIDEO_TYPES = ("video/mp4", "video/webm")

USER_ROLES = ("host", "guest", "admin")

# scheduled_messages.status
SCHEDULED = "scheduled"
SENDING = "sending"
SENT = "sent"
FAILED = "failed"
CANCELLED = "cancelled"

# message_deliveries.*_status
DELIVERY_PENDING = "pending"
DELIVERY_NOT_APPLICABLE = "not_applicable"

SMS_MAX_ANNOUNCEMENT_LENGTH = 1500
