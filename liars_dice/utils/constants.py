"""Constants for the Liar's Dice engine."""

from enum import StrEnum


FACES: tuple[int, ...] = (1, 2, 3, 4, 5, 6)
MIN_FACE = 1
MAX_FACE = 6
WILD_VALUE = 1  # Counts toward every bet value, but ranks lowest for ordering

INITIAL_DICE_COUNT = 5
MAX_DICE_PER_PLAYER = 999

HUMAN_PLAYER_ID = "human"
AI_PLAYER_ID = "ai"
HUMAN_PLAYER_NAME = "You"
AI_PLAYER_NAME = "Android"


class GamePhase(StrEnum):
    STARTING = "starting"
    BETTING = "betting"
    REVEALING = "revealing"
    ENDED = "ended"


class EventType(StrEnum):
    BET = "bet"
    CHALLENGE = "challenge"
    RESULT = "result"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ActionKind(StrEnum):
    BET = "bet"
    CHALLENGE = "challenge"
