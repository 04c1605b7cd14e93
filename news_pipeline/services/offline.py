"""
Deterministic, network-free content used as the last tier of every fallback chain.

Two techniques:
- keyword tables: the first entry whose keyword occurs in the article text wins
  (summaries, tags, snippets, stock imagery, canned videos, coordinates)
- rotations: a stable 32-bit hash of ``title + tags`` indexes a short list of
  plausible strings (sentiment, search trends), so identical input always
  yields the same text and different input usually does not
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..models.schemas import Geo

# ---------------------------------------------------------------------------
# Text generation

# Topic buckets shared by every text table. China/trade needs both words,
# the others need any one of theirs.
CHINA_TRADE = "china_trade"
ENERGY = "energy"
AFRICA = "africa"

ENERGY_KEYWORDS = ("renewable", "solar", "energy")


def topic_bucket(text: str, include_africa: bool = True) -> Optional[str]:
    text = text.lower()
    if "china" in text and "trade" in text:
        return CHINA_TRADE
    if any(keyword in text for keyword in ENERGY_KEYWORDS):
        return ENERGY
    if include_africa and "africa" in text:
        return AFRICA
    return None


MOCK_SUMMARIES: Dict[Optional[str], str] = {
    CHINA_TRADE: "This article discusses escalating trade tensions between China and the US, focusing on rare earth export controls and their impact on global supply chains and bilateral relations.",
    ENERGY: "This article discusses significant developments in renewable energy infrastructure across Southern Africa, highlighting key investments and policy changes that will impact the region's energy transition.",
    AFRICA: "This article covers important developments affecting African economies and societies, with potential regional and continental implications.",
    None: "This article discusses current events and developments with potential impact on global markets and international relations.",
}

MOCK_TAGS: Dict[Optional[str], List[str]] = {
    CHINA_TRADE: ["#China", "#TradeWar", "#RareEarths", "#USChina", "#Geopolitics"],
    ENERGY: ["#RenewableEnergy", "#SouthAfrica", "#GreenTransition", "#Infrastructure", "#Sustainability"],
    AFRICA: ["#Africa", "#Development", "#Economy", "#Policy", "#News"],
    None: ["#News", "#Global", "#Politics", "#Economy", "#International"],
}

MOCK_JUSTIFICATIONS: Dict[Optional[str], str] = {
    CHINA_TRADE: "Selected this media because it visually represents international trade and geopolitical tensions, showing economic and political elements that align with the article's focus on US-China trade relations.",
    ENERGY: "Selected this image because it visually represents renewable energy infrastructure in Africa, showing solar panels and wind turbines that align with the article's focus on green energy transition.",
    None: "Selected this media because it visually represents the article's main themes and provides relevant context for readers.",
}

# ---------------------------------------------------------------------------
# Encyclopedic snippets, keyed by topic substring

MOCK_SNIPPETS: Dict[str, str] = {
    "china": "China is the world's most populous country and second-largest economy, known for its rich history, rapid economic development, and significant global influence.",
    "trade war": "A trade war is an economic conflict between countries involving tariffs, trade barriers, and other restrictions on imports and exports.",
    "rare earth": "Rare earth elements are a group of 17 chemical elements essential for modern technology, including electronics, renewable energy systems, and defense applications.",
    "us-china": "US-China relations refer to the complex diplomatic, economic, and strategic relationship between the United States and China, the world's two largest economies.",
    "geopolitics": "Geopolitics is the study of how geography, economics, and politics influence international relations and global power dynamics.",
    "renewable energy": "Renewable energy is energy from sources that are naturally replenishing but flow-limited. It includes solar, wind, hydroelectric, and geothermal power.",
    "south africa": "South Africa is a country in Southern Africa known for its diverse geography, rich mineral resources, and complex political history.",
    "solar power": "Solar power is the conversion of energy from sunlight into electricity using photovoltaics or concentrated solar power systems.",
    "wind energy": "Wind energy is the use of wind to provide mechanical power through wind turbines to turn electric generators for electrical power.",
    "africa": "Africa is the world's second-largest continent, home to 54 countries and over 1.3 billion people with diverse cultures and economies.",
    "energy": "Energy is the capacity to do work and can be converted from one form to another, including electrical, thermal, and mechanical energy.",
}

# ---------------------------------------------------------------------------
# Media

MOCK_IMAGES: Dict[str, str] = {
    "renewable": "https://images.unsplash.com/photo-1466611653911-95081537e5b7?w=800&h=600&fit=crop",
    "energy": "https://images.unsplash.com/photo-1497435334941-8c899ee9e8e9?w=800&h=600&fit=crop",
    "africa": "https://images.unsplash.com/photo-1516026672322-bc52d61a55d5?w=800&h=600&fit=crop",
    "solar": "https://images.unsplash.com/photo-1509391366360-2e959784a276?w=800&h=600&fit=crop",
    "wind": "https://images.unsplash.com/photo-1581094794329-c8112a89af12?w=800&h=600&fit=crop",
    "hydro": "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=800&h=600&fit=crop",
    "default": "https://images.unsplash.com/photo-1586339949916-3e9457bef6d3?w=800&h=600&fit=crop",
}

# keywords -> image table key, checked in order
IMAGE_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("renewable", "solar", "wind"), "renewable"),
    (("energy", "power"), "energy"),
    (("africa",), "africa"),
    (("hydro",), "hydro"),
]
VIDEO_RULES = IMAGE_RULES[:3]

CANNED_VIDEO_URL = "https://www.youtube.com/watch?v=U3AZQJz--mg"
MOCK_VIDEOS: Dict[str, str] = {
    "renewable": CANNED_VIDEO_URL,
    "energy": CANNED_VIDEO_URL,
    "africa": CANNED_VIDEO_URL,
    "default": CANNED_VIDEO_URL,
}

# ---------------------------------------------------------------------------
# Signals

SENTIMENT_ROTATIONS: Dict[Optional[str], List[str]] = {
    CHINA_TRADE: [
        "45% neutral sentiment (confidence: 60%)",
        "52% mixed sentiment (confidence: 65%)",
        "38% negative sentiment (confidence: 70%)",
        "41% cautious sentiment (confidence: 55%)",
    ],
    ENERGY: [
        "74% positive mentions on X in last 24h",
        "68% positive sentiment across social platforms",
        "82% positive engagement on LinkedIn",
        "71% favorable discussion on Twitter",
        "76% positive sentiment on Facebook",
        "69% positive mentions on social media",
    ],
    None: [
        "55% neutral sentiment (confidence: 60%)",
        "48% mixed sentiment (confidence: 65%)",
        "52% moderate sentiment (confidence: 70%)",
        "45% balanced sentiment (confidence: 55%)",
    ],
}

TREND_ROTATIONS: Dict[Optional[str], List[str]] = {
    CHINA_TRADE: [
        "'China trade war' +234% trending",
        "'US China tensions' +189% search increase",
        "'Rare earth China' +156% this week",
        "'Trade war 2024' +178% trending topics",
        "'China export controls' +145% search growth",
        "'US China relations' +167% trending",
    ],
    ENERGY: [
        "'SA renewables' +150% this week",
        "'African energy' +89% search increase",
        "'Solar Africa' +134% trending",
        "'Green energy' +112% this month",
        "'Renewable power' +98% search growth",
        "'Clean energy' +156% trending topics",
    ],
    None: [
        "'Global news' +78% this week",
        "'International politics' +89% search increase",
        "'World events' +67% trending",
        "'Breaking news' +112% this month",
        "'Current events' +98% search growth",
        "'News analysis' +134% trending topics",
    ],
}

# ---------------------------------------------------------------------------
# Geo

# Checked in order. South African places come first.
# All-caps keys are matched case-sensitively, so the pronoun "us" is not the US.
MOCK_LOCATIONS: Dict[str, Tuple[float, float, str]] = {
    "south africa": (-30.5595, 22.9375, "South Africa"),
    "cape town": (-33.9249, 18.4241, "South Africa"),
    "johannesburg": (-26.2041, 28.0473, "South Africa"),
    "pretoria": (-25.7479, 28.2293, "South Africa"),
    "durban": (-29.8587, 31.0218, "South Africa"),
    "china": (35.86166, 104.195397, "China"),
    "beijing": (39.9042, 116.4074, "China"),
    "shanghai": (31.2304, 121.4737, "China"),
    "united states": (39.8283, -98.5795, "United States"),
    "usa": (39.8283, -98.5795, "United States"),
    "US": (39.8283, -98.5795, "United States"),
    "washington": (38.9072, -77.0369, "United States"),
    "africa": (-8.7832, 34.5085, "Africa"),
}
DEFAULT_LOCATION = (-25.7479, 28.2293, "South Africa")


def stable_hash(text: str) -> int:
    """32-bit polynomial string hash (``h * 31 + c``), returned as a non-negative int."""
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return abs(value)


def build_map_url(lat: float, lng: float) -> str:
    return f"https://www.openstreetmap.org/?mlat={lat}&mlon={lng}&zoom=10"


def _rotate(title: str, tags: Sequence[str], rotations: Dict[Optional[str], List[str]]) -> str:
    options = rotations[topic_bucket(f"{title} {' '.join(tags)}", include_africa=False)]
    return options[stable_hash(title + "".join(tags)) % len(options)]


def mock_summary(title: str, body: str) -> str:
    return MOCK_SUMMARIES[topic_bucket(f"{title} {body}")]


def mock_tags(title: str, body: str) -> List[str]:
    return list(MOCK_TAGS[topic_bucket(f"{title} {body}")])


def mock_relevance(title: str, body: str) -> str:
    text = f"{title} {body}".lower()
    if "africa" in text:
        return "0.85"
    # Trade wars still move African markets
    if "china" in text and "trade" in text:
        return "0.65"
    return "0.70"


def mock_media_justification(title: str, body: str) -> str:
    return MOCK_JUSTIFICATIONS[topic_bucket(f"{title} {body}", include_africa=False)]


def mock_wikipedia_snippet(topic: str) -> str:
    topic_lower = topic.lower()
    for key, snippet in MOCK_SNIPPETS.items():
        if key in topic_lower:
            return snippet
    return (
        f'Wikipedia information about "{topic}" would provide comprehensive details about this topic, '
        "including its definition, history, and significance."
    )


def mock_image(title: str, tags: Sequence[str]) -> str:
    text = f"{title} {' '.join(tags)}".lower()
    for keywords, key in IMAGE_RULES:
        if any(keyword in text for keyword in keywords):
            return MOCK_IMAGES[key]
    return MOCK_IMAGES["default"]


def mock_video(title: str, tags: Sequence[str]) -> str:
    text = f"{title} {' '.join(tags)}".lower()
    for keywords, key in VIDEO_RULES:
        if any(keyword in text for keyword in keywords):
            return MOCK_VIDEOS[key]
    return MOCK_VIDEOS["default"]


def mock_sentiment(title: str, tags: Sequence[str]) -> str:
    return _rotate(title, tags, SENTIMENT_ROTATIONS)


def mock_search_trend(title: str, tags: Sequence[str]) -> str:
    return _rotate(title, tags, TREND_ROTATIONS)


def mock_geo(title: str, body: str) -> Geo:
    text = f"{title} {body}"
    for keyword, (lat, lng, address) in MOCK_LOCATIONS.items():
        # Whole words only, so "US" does not match "FOCUSES"
        flags = 0 if keyword.isupper() else re.IGNORECASE
        if re.search(rf"\b{re.escape(keyword)}\b", text, flags):
            return Geo(lat=lat, lng=lng, map_url=build_map_url(lat, lng), formatted_address=address)
    lat, lng, address = DEFAULT_LOCATION
    return Geo(lat=lat, lng=lng, map_url=build_map_url(lat, lng), formatted_address=address)
