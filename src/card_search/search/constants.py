"""Fixed vocabularies and scoring constants used by query understanding."""

# Card-type vocabularies, matched as whole words or phrases
ROOKIE_TERMS = ("rookie", "rookies", "rc", "rcs", "1st bowman", "first bowman", "prospect")
AUTOGRAPH_TERMS = ("autograph", "autographed", "auto", "autos", "signed", "sig")
SHORT_PRINT_TERMS = ("short print", "super short", "sp", "ssp", "variation", "variant", "var")
RELIC_TERMS = ("relic", "jersey", "patch", "memorabilia", "game-used", "game used")

CARD_TYPE_TERMS = ROOKIE_TERMS + AUTOGRAPH_TERMS + SHORT_PRINT_TERMS + RELIC_TERMS

# Color and finish words that identify parallels
PARALLEL_TERMS = (
    "refractor",
    "prizm",
    "shimmer",
    "xfractor",
    "superfractor",
    "red",
    "blue",
    "green",
    "gold",
    "silver",
    "orange",
    "purple",
    "black",
    "white",
    "wave",
    "atomic",
    "sepia",
    "negative",
    "camo",
    "pink",
    "yellow",
    "teal",
    "bronze",
    "platinum",
    "emerald",
    "sapphire",
    "ruby",
    "rainbow",
    "prism",
    "chrome",
)

# Parallel words that are also part of set names ("Bowman Chrome", "Panini Prizm")
SET_NAME_FINISHES = frozenset({"chrome", "prism", "prizm"})

# Design/aesthetic terms recorded as free keywords
DESIGN_KEYWORDS = (
    "mojo",
    "cracked ice",
    "wave",
    "atomic",
    "shimmer",
    "prism",
    "mosaic",
    "disco",
    "holo",
    "holographic",
    "foil",
    "metallic",
    "die-cut",
    "die cut",
    "acetate",
    "laser",
    "neon",
    "platinum",
    "rainbow",
    "spectrum",
    "sparkle",
    "numbered",
    "limited",
)

# Insert/subset names looked up against series names
INSERT_TERMS = (
    "chrome prospects",
    "bowman prospects",
    "future stars",
    "rookie debut",
    "draft picks",
    "1st edition",
    "first edition",
    "all-star",
    "all star",
    "prospects",
    "traded",
    "update",
    "reserve",
    "finest",
    "sterling",
    "tribute",
    "heritage",
    "redux",
)

# Hyphenated words that look like card numbers but are vocabulary
VOCABULARY_HYPHENATED = frozenset({"game-used", "die-cut", "all-star"})

# Single-word abbreviations expanded before a second extraction pass
ABBREVIATIONS: dict[str, str] = {
    # Sets and manufacturers
    "bc": "bowman chrome",
    "tc": "topps chrome",
    "ud": "upper deck",
    "sp": "sp authentic",
    "bo": "bowman",
    "bg": "bowman draft",
    "bd": "bowman draft",
    "bcp": "bowman chrome prospects",
    "tcu": "topps chrome update",
    "tu": "topps update",
    "ts": "topps series",
    "sc": "stadium club",
    "gq": "gypsy queen",
    "ag": "allen ginter",
    "a&g": "allen ginter",
    "her": "heritage",
    "arch": "archive",
    # Card types
    "rc": "rookie",
    "auto": "autograph",
    "mem": "memorabilia",
    "ssp": "super short print",
    # MLB team codes
    "laa": "angels",
    "ari": "diamondbacks",
    "atl": "braves",
    "bal": "orioles",
    "bos": "red sox",
    "chc": "cubs",
    "cws": "white sox",
    "cin": "reds",
    "cle": "guardians",
    "col": "rockies",
    "det": "tigers",
    "hou": "astros",
    "kc": "royals",
    "mia": "marlins",
    "mil": "brewers",
    "min": "twins",
    "nym": "mets",
    "nyy": "yankees",
    "oak": "athletics",
    "phi": "phillies",
    "pit": "pirates",
    "sd": "padres",
    "sf": "giants",
    "sea": "mariners",
    "stl": "cardinals",
    "tb": "rays",
    "tex": "rangers",
    "tor": "blue jays",
    "was": "nationals",
    # Ordinals
    "1st": "first",
    "2nd": "second",
    "3rd": "third",
}

# Confidence assigned by pattern extractors
YEAR_CONFIDENCE = 95
SERIAL_SLASH_CONFIDENCE = 95
SERIAL_PHRASE_CONFIDENCE = 85
PRODUCTION_CODE_CONFIDENCE = 98
PARALLEL_CONFIDENCE = 85
KEYWORD_PARALLEL_CONFIDENCE = 80
KEYWORD_CONFIDENCE = 75
INSERT_NAME_CONFIDENCE = 90
INSERT_PARTIAL_CONFIDENCE = 80

# Relevance contributed by a card-type flag
CARD_TYPE_CONFIDENCE = 90

# Name candidates within this many points of the best survive post-filtering
CANDIDATE_SPREAD = 15
STRONG_MATCH_CONFIDENCE = 95

# Suggestions are offered below this top-token confidence
SUGGESTION_THRESHOLD = 70
MAX_PLAYER_SUGGESTIONS = 2

# Oldest year a card can carry
MIN_CARD_YEAR = 1887
YEAR_LOOKAHEAD = 2
MAX_PRINT_RUN = 9999
