"""
Static word-class lexicons used to bias query refinement.

Closed sets for color, mood and composition vocabulary plus an English
stopword list. The three domain sets are kept disjoint, but scoring does
not rely on that.
"""

from ..version import LEXICON_VERSION

COLOR_WORDS = frozenset(
    {
        "amber", "azure", "beige", "black", "blue", "bronze", "brown", "burgundy",
        "charcoal", "crimson", "cyan", "dark", "emerald", "gold", "golden", "gray",
        "green", "grey", "indigo", "ivory", "lavender", "magenta", "maroon",
        "monochrome", "navy", "neon", "ochre", "olive", "orange", "pastel", "pink",
        "purple", "red", "rust", "sapphire", "scarlet", "sepia", "silver", "teal",
        "turquoise", "violet", "white", "yellow",
    }
)

MOOD_WORDS = frozenset(
    {
        "bleak", "calm", "cheerful", "cold", "cozy", "dramatic", "dreamy", "eerie",
        "ethereal", "gloomy", "haunting", "hopeful", "joyful", "lonely", "melancholy",
        "melancholic", "moody", "mysterious", "nostalgic", "ominous", "peaceful",
        "playful", "quiet", "romantic", "sad", "serene", "solitude", "somber",
        "stormy", "surreal", "tense", "tranquil", "warm", "whimsical", "wistful",
    }
)

COMPOSITION_WORDS = frozenset(
    {
        "aerial", "background", "bokeh", "centered", "closeup", "figure", "foreground",
        "frame", "grain", "horizon", "landscape", "macro", "minimal", "minimalist",
        "overhead", "panorama", "panoramic", "portrait", "reflection", "shadow",
        "silhouette", "single", "skyline", "symmetry", "symmetrical", "vanishing",
        "vast", "vignette", "wide",
    }
)

STOPWORDS = frozenset(
    {
        # Articles and determiners
        "a", "an", "the", "this", "that", "these", "those", "some", "any", "each",
        "every", "all", "both", "either", "neither", "such",
        # Pronouns
        "i", "me", "my", "we", "our", "you", "your", "he", "him", "his", "she",
        "her", "it", "its", "they", "them", "their", "what", "which", "who", "whom",
        # Prepositions and conjunctions
        "about", "above", "after", "against", "along", "among", "and", "around",
        "as", "at", "before", "behind", "below", "beneath", "beside", "between",
        "but", "by", "for", "from", "in", "into", "near", "nor", "of", "off", "on",
        "onto", "or", "out", "over", "since", "so", "than", "through", "till", "to",
        "toward", "towards", "under", "until", "up", "upon", "with", "within",
        "without", "yet",
        # Auxiliaries and common verbs
        "am", "are", "be", "been", "being", "can", "could", "did", "do", "does",
        "had", "has", "have", "having", "is", "may", "might", "must", "shall",
        "should", "was", "were", "will", "would",
        # Adverbs and fillers
        "again", "also", "just", "more", "most", "much", "not", "now", "only",
        "other", "own", "same", "then", "there", "too", "very", "here", "how",
        "when", "where", "why", "like",
        # Image-title noise
        "image", "photo", "photograph", "picture", "untitled", "img", "jpg", "jpeg",
        "png", "file",
    }
)

STOPLIST_VERSION = LEXICON_VERSION
