"""
Closed enumerations shared by models and payload schemas
"""
import enum


class Difficulty(str, enum.Enum):
    FACILE = "FACILE"
    MOYEN = "MOYEN"
    DIFFICILE = "DIFFICILE"


class FlashcardDifficulty(str, enum.Enum):
    NOUVEAU = "NOUVEAU"
    DIFFICILE = "DIFFICILE"
    MOYEN = "MOYEN"
    FACILE = "FACILE"
    ACQUISE = "ACQUISE"


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"
