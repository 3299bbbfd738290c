"""Domain constants shared by the service layer and the API."""

# Post feed and notification poll use a fixed radius whatever the caller asks for
POST_RADIUS_KM = 1.0
POST_BOX_DEGREES = 0.02

# User discovery
DEFAULT_DISCOVERY_RADIUS_KM = 5.0
MIN_RADIUS_KM = 0.5
MAX_RADIUS_KM = 50.0

# Pagination caps
MAX_PAGE_SIZE = 100
DEFAULT_MESSAGE_PAGE = 50
DEFAULT_JOIN_REQUEST_PAGE = 50
CONVERSATION_SCAN_LIMIT = 200
MAX_CONVERSATIONS = 50
FRIENDS_POSTS_LIMIT = 50
USER_SEARCH_LIMIT = 10
MIN_SEARCH_LENGTH = 2

# Notification poll default window when the client sends no last_checked
NOTIFICATION_DEFAULT_WINDOW_MINUTES = 60

# Uploads
MAX_UPLOAD_MB = 5
ALLOWED_IMAGE_TYPES = ('image/jpeg', 'image/jpg', 'image/png', 'image/gif', 'image/webp')

MIN_PASSWORD_LENGTH = 6
