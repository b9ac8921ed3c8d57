# The remote catalog filters on at most 5 tags
MAX_TAGS = 5
# A single page of recommended games
MAX_GAMES = 10
# Must stay above MAX_GAMES so installed titles can be skipped
MAX_FETCHED_GAMES = 15

# Above this many duplicates a single aggregate notice is emitted
DUPLICATE_NOTICE_THRESHOLD = 5

UNKNOWN_VERSION = "Unknown"
VERSION_PREFIX = "[V."
MOD_TAG = "[MOD]"

# Characters kept by clean_game_name so version tags survive until stripped
GAME_NAME_ALLOWED_CHARS = frozenset("-[].0123456789")

# Characters that are not valid in directory names on common filesystems
RESERVED_PATH_CHARS = '/\\?%*:|"<>'

LATEST_UPDATES_SORTING = "rating"
