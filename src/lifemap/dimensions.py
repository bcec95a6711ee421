"""Life dimensions, tag types and archetypes.

Static registry: nothing here is mutated at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class Dimension(str, Enum):
    """A life area that tags and imported items are classified into."""

    CAREER = "Career"
    SPIRITUAL = "Spiritual"
    HEALTH = "Health"
    SOCIAL = "Social"
    INTELLECTUAL = "Intellectual"
    ENTERTAINMENT = "Entertainment"
    UNASSIGNED = "Unassigned"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "str | Dimension | None") -> "Dimension | None":
        """Return the dimension named by ``value`` (case-insensitive), else None."""
        if value is None:
            return None
        if isinstance(value, Dimension):
            return value
        key = value.strip().lower()
        for dim in cls:
            if dim.value.lower() == key:
                return dim
        # Older journals used "Physical" before the Health rename
        if key == "physical":
            return cls.HEALTH
        return None


# Registry order is the tie-break order for dominant dimensions and archetypes.
SCORING_DIMENSIONS: tuple[Dimension, ...] = (
    Dimension.CAREER,
    Dimension.SPIRITUAL,
    Dimension.HEALTH,
    Dimension.SOCIAL,
    Dimension.INTELLECTUAL,
    Dimension.ENTERTAINMENT,
)

# Label the oracle falls back to when it answers with something unknown.
DEFAULT_CATEGORY = Dimension.ENTERTAINMENT


@dataclass(frozen=True)
class DimensionInfo:
    color: str
    description: str
    keywords: tuple[str, ...]


DIMENSION_CONFIG: MappingProxyType[Dimension, DimensionInfo] = MappingProxyType({
    Dimension.CAREER: DimensionInfo(
        color="#00D4FF",
        description="Coding, Finance, Business, Work, Professional Development, Tech",
        keywords=(
            "work", "project", "meeting", "learning", "skill", "coding",
            "business", "finance", "career", "programming", "startup", "tech",
        ),
    ),
    Dimension.SPIRITUAL: DimensionInfo(
        color="#B026FF",
        description="Meditation, Philosophy, Religion, Mindfulness, Personal Growth",
        keywords=(
            "meditation", "prayer", "reflection", "journaling", "gratitude",
            "reading", "mindfulness", "philosophy", "religion", "faith",
        ),
    ),
    Dimension.HEALTH: DimensionInfo(
        color="#39FF14",
        description="Gym, Diet, Sleep, Fitness, Exercise, Wellness, Sports",
        keywords=(
            "exercise", "gym", "running", "yoga", "health", "sleep",
            "nutrition", "sports", "fitness", "diet", "workout", "wellness",
        ),
    ),
    Dimension.SOCIAL: DimensionInfo(
        color="#FF00FF",
        description="Friends, Family, Dates, Community, Relationships, Networking",
        keywords=(
            "family", "friends", "community", "relationship", "networking",
            "social", "event", "date", "party",
        ),
    ),
    Dimension.INTELLECTUAL: DimensionInfo(
        color="#FFD700",
        description="Books, History, Science, Education, Research, Documentaries",
        keywords=(
            "books", "history", "science", "education", "research",
            "documentary", "study", "math", "physics", "lecture",
        ),
    ),
    Dimension.ENTERTAINMENT: DimensionInfo(
        color="#FF6B35",
        description="Movies, Games, Memes, Fun, Leisure, Hobbies, Music, Comedy",
        keywords=(
            "movies", "movie", "games", "gaming", "memes", "fun", "music",
            "comedy", "netflix", "anime", "trailer",
        ),
    ),
    Dimension.UNASSIGNED: DimensionInfo(
        color="#808080",
        description="Tags that match no dimension yet",
        keywords=(),
    ),
})

KEYWORD_DIMENSIONS: MappingProxyType[str, Dimension] = MappingProxyType({
    keyword: dim
    for dim, info in DIMENSION_CONFIG.items()
    for keyword in info.keywords
})


def dimension_for_keyword(tag: str) -> Dimension | None:
    """Keyword-seed fallback lookup for an already-normalized tag."""
    return KEYWORD_DIMENSIONS.get(tag)


def dimension_color(dimension: Dimension | str) -> str:
    dim = Dimension.parse(dimension) if isinstance(dimension, str) else dimension
    if dim is None:
        return DIMENSION_CONFIG[Dimension.UNASSIGNED].color
    return DIMENSION_CONFIG[dim].color


class TagType(str, Enum):
    """What kind of entity a tag names."""

    CONCEPT = "Concept"
    BOOK = "Book"
    PERSON = "Person"
    PROJECT = "Project"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: "str | TagType | None") -> "TagType":
        """Parse a tag type, defaulting to Concept."""
        if isinstance(value, TagType):
            return value
        for tag_type in cls:
            if value and tag_type.value.lower() == value.strip().lower():
                return tag_type
        return cls.CONCEPT


@dataclass(frozen=True)
class TagTypeInfo:
    shape: str
    color: str
    description: str


TAG_TYPE_CONFIG: MappingProxyType[TagType, TagTypeInfo] = MappingProxyType({
    TagType.CONCEPT: TagTypeInfo("circle", "#00D4FF", "General concepts, activities, or feelings"),
    TagType.BOOK: TagTypeInfo("square", "#FFD700", "Books, articles, or written resources"),
    TagType.PERSON: TagTypeInfo("triangle", "#FF00FF", "People, authors, or mentors"),
    TagType.PROJECT: TagTypeInfo("diamond", "#39FF14", "Projects, goals, or ongoing work"),
})


ARCHETYPES: MappingProxyType[Dimension, str] = MappingProxyType({
    Dimension.CAREER: "Builder",
    Dimension.SPIRITUAL: "Seeker",
    Dimension.HEALTH: "Warrior",
    Dimension.SOCIAL: "Connector",
    Dimension.INTELLECTUAL: "Scholar",
    Dimension.ENTERTAINMENT: "Dreamer",
})

DEFAULT_ARCHETYPE = "Explorer"
