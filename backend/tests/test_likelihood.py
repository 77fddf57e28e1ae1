"""
Pruebas del scorer de verosimilitudes y del esquema emocional.
"""

import enum

import pytest

from emotune.core.emotion.likelihood import score
from emotune.core.emotion.schema import (
    Emotion,
    get_all_emotions,
    is_valid_emotion,
    normalize_emotion,
    parse_emotion,
)


class Likelihood(enum.IntEnum):
    UNKNOWN = 0
    VERY_UNLIKELY = 1
    UNLIKELY = 2
    POSSIBLE = 3
    LIKELY = 4
    VERY_LIKELY = 5


@pytest.mark.parametrize("label, expected", [
    ("VERY_UNLIKELY", 0.1),
    ("UNLIKELY", 0.3),
    ("POSSIBLE", 0.5),
    ("LIKELY", 0.7),
    ("VERY_LIKELY", 0.9),
    ("UNKNOWN", 0.0),
])
def test_score_known_labels(label, expected):
    assert score(label) == expected


def test_score_unrecognized_values_are_zero():
    assert score("SOMEWHAT_LIKELY") == 0.0
    assert score("likely") == 0.0
    assert score(None) == 0.0
    assert score(42) == 0.0


def test_score_accepts_enum_members():
    """El cliente de Google devuelve miembros de un enum, se usa su nombre."""
    assert score(Likelihood.LIKELY) == 0.7
    assert score(Likelihood.VERY_UNLIKELY) == 0.1


def test_normalize_emotion_maps_provider_labels():
    assert normalize_emotion("joy") == Emotion.HAPPY
    assert normalize_emotion("Sorrow") == Emotion.SAD
    assert normalize_emotion("fear") == Emotion.FEARFUL
    assert normalize_emotion("disgust") == Emotion.DISGUSTED
    assert normalize_emotion("surprised") == Emotion.SURPRISED
    assert normalize_emotion("martian") == Emotion.NEUTRAL
    assert normalize_emotion(None) == Emotion.NEUTRAL


def test_parse_emotion_is_strict():
    assert parse_emotion(" Happy ") == Emotion.HAPPY
    assert parse_emotion(Emotion.SAD) == Emotion.SAD
    with pytest.raises(ValueError):
        parse_emotion("joy")
    with pytest.raises(ValueError):
        parse_emotion(3)
    assert not is_valid_emotion("martian")
    assert is_valid_emotion("disgusted")


def test_all_emotions_in_declaration_order():
    assert get_all_emotions() == [
        'happy', 'sad', 'angry', 'surprised', 'neutral', 'fearful', 'disgusted'
    ]
