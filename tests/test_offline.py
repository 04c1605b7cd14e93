from news_pipeline.services import offline


def test_stable_hash_matches_reference_values():
    assert offline.stable_hash("") == 0
    assert offline.stable_hash("a") == 97
    assert offline.stable_hash("ab") == 97 * 31 + 98


def test_stable_hash_wraps_to_32_bits():
    value = offline.stable_hash("South Africa Embraces Solar" * 10)
    assert 0 <= value <= 2 ** 31


def test_topic_bucket_priority():
    assert offline.topic_bucket("China trade talks on solar panels") == offline.CHINA_TRADE
    assert offline.topic_bucket("New solar farm") == offline.ENERGY
    assert offline.topic_bucket("Elections in Africa") == offline.AFRICA
    assert offline.topic_bucket("Elections in Africa", include_africa=False) is None
    assert offline.topic_bucket("Football results") is None


def test_mock_text_tables():
    assert offline.mock_tags("Solar boom", "") == offline.MOCK_TAGS[offline.ENERGY]
    assert offline.mock_summary("Football results", "") == offline.MOCK_SUMMARIES[None]
    assert offline.mock_media_justification("Elections in Africa", "") == offline.MOCK_JUSTIFICATIONS[None]


def test_mock_relevance():
    assert offline.mock_relevance("Kenya votes", "across Africa") == "0.85"
    assert offline.mock_relevance("China trade", "tariffs") == "0.65"
    assert offline.mock_relevance("Football", "results") == "0.70"


def test_mock_wikipedia_snippet():
    assert offline.mock_wikipedia_snippet("Renewable Energy") == offline.MOCK_SNIPPETS["renewable energy"]
    assert '"Quantum"' in offline.mock_wikipedia_snippet("Quantum")


def test_mock_media():
    assert offline.mock_image("Wind farm opens", []) == offline.MOCK_IMAGES["renewable"]
    assert offline.mock_image("Power cuts", []) == offline.MOCK_IMAGES["energy"]
    assert offline.mock_image("Dam", ["#Hydro"]) == offline.MOCK_IMAGES["hydro"]
    assert offline.mock_image("Football", []) == offline.MOCK_IMAGES["default"]
    assert offline.mock_video("Anything", []) == offline.CANNED_VIDEO_URL


def test_rotations_are_deterministic():
    tags = ["#RenewableEnergy", "#SouthAfrica"]
    first = offline.mock_sentiment("Solar boom", tags)
    assert first == offline.mock_sentiment("Solar boom", tags)
    assert first in offline.SENTIMENT_ROTATIONS[offline.ENERGY]
    assert offline.mock_search_trend("Football", []) in offline.TREND_ROTATIONS[None]


def test_mock_geo_matches_whole_words_only():
    geo = offline.mock_geo("Plan focuses on jobs", "The minister discusses the budget")
    assert geo.formatted_address == "South Africa"
    assert (geo.lat, geo.lng) == offline.DEFAULT_LOCATION[:2]

    us = offline.mock_geo("Tariffs hit the US", "")
    assert us.formatted_address == "United States"


def test_mock_geo_builds_map_url():
    geo = offline.mock_geo("Floods in Durban", "")
    assert geo.formatted_address == "South Africa"
    assert geo.map_url == offline.build_map_url(-29.8587, 31.0218)


def test_mock_geo_ignores_the_pronoun_us():
    geo = offline.mock_geo(
        "South Africa Embraces Solar",
        "The minister told us the plan will power South Africa's grid.",
    )
    assert geo.formatted_address == "South Africa"

    assert offline.mock_geo("Talks stall", "Officials told us nothing new").formatted_address == "South Africa"


def test_mock_geo_prefers_south_african_places():
    geo = offline.mock_geo("Washington delegation visits Cape Town", "")
    assert geo.formatted_address == "South Africa"
    assert (geo.lat, geo.lng) == (-33.9249, 18.4241)


def test_rotations_vary_with_title():
    tags = ["#RenewableEnergy", "#SouthAfrica"]
    titles = [
        "Solar boom",
        "Solar farm opens in the Karoo",
        "Renewable energy auction results",
        "Wind and solar hit record output",
        "Energy minister announces new bid window",
        "Solar panel imports rise",
        "Rooftop solar rules relaxed",
        "Battery storage joins the grid",
        "Green hydrogen plant approved",
        "Solar jobs programme launched",
    ]

    sentiments = {offline.mock_sentiment(title, tags) for title in titles}
    trends = {offline.mock_search_trend(title, tags) for title in titles}

    assert len(sentiments) > 1
    assert len(trends) > 1
    assert sentiments <= set(offline.SENTIMENT_ROTATIONS[offline.ENERGY])
    assert trends <= set(offline.TREND_ROTATIONS[offline.ENERGY])
