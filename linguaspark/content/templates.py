"""
Statically authored backup rounds, keyed by game type, difficulty and
language pair (``"<source code>-<target code>"``).
"""

from typing import Any

FALLBACK_TEMPLATES: dict[str, dict[str, dict[str, dict[str, Any]]]] = {
    "translation-matchup": {
        "beginner": {
            "en-es": {
                "rounds": [
                    {"word": "hello", "translation": "hola", "options": ["hola", "adiós", "gracias", "por favor"]},
                    {"word": "goodbye", "translation": "adiós", "options": ["adiós", "hola", "sí", "no"]},
                    {"word": "thank you", "translation": "gracias", "options": ["gracias", "de nada", "perdón", "hola"]},
                    {"word": "please", "translation": "por favor", "options": ["por favor", "gracias", "adiós", "hola"]},
                    {"word": "yes", "translation": "sí", "options": ["sí", "no", "tal vez", "nunca"]},
                ],
                "instructions": "Match each English word with its Spanish translation.",
            },
            "en-fr": {
                "rounds": [
                    {"word": "hello", "translation": "bonjour", "options": ["bonjour", "au revoir", "merci", "s'il vous plaît"]},
                    {"word": "goodbye", "translation": "au revoir", "options": ["au revoir", "bonjour", "oui", "non"]},
                    {"word": "thank you", "translation": "merci", "options": ["merci", "de rien", "pardon", "bonjour"]},
                    {"word": "please", "translation": "s'il vous plaît", "options": ["s'il vous plaît", "merci", "au revoir", "bonjour"]},
                    {"word": "yes", "translation": "oui", "options": ["oui", "non", "peut-être", "jamais"]},
                ],
                "instructions": "Match each English word with its French translation.",
            },
        },
        "intermediate": {
            "en-es": {
                "rounds": [
                    {"word": "beautiful", "translation": "hermoso", "options": ["hermoso", "feo", "grande", "pequeño"]},
                    {"word": "important", "translation": "importante", "options": ["importante", "fácil", "difícil", "nuevo"]},
                    {"word": "family", "translation": "familia", "options": ["familia", "amigo", "casa", "trabajo"]},
                    {"word": "school", "translation": "escuela", "options": ["escuela", "hospital", "tienda", "parque"]},
                    {"word": "happy", "translation": "feliz", "options": ["feliz", "triste", "enojado", "cansado"]},
                ],
                "instructions": "Match each English word with its Spanish translation.",
            },
        },
    },
    "conjugation-coach": {
        "beginner": {
            "en-es": {
                "rounds": [
                    {"verb": "ser", "pronoun": "yo", "correct": "soy", "options": ["soy", "eres", "es", "somos"]},
                    {"verb": "ser", "pronoun": "tú", "correct": "eres", "options": ["eres", "soy", "es", "son"]},
                    {"verb": "tener", "pronoun": "yo", "correct": "tengo", "options": ["tengo", "tienes", "tiene", "tenemos"]},
                    {"verb": "tener", "pronoun": "él", "correct": "tiene", "options": ["tiene", "tengo", "tienes", "tienen"]},
                    {"verb": "hacer", "pronoun": "yo", "correct": "hago", "options": ["hago", "haces", "hace", "hacemos"]},
                ],
                "instructions": "Choose the correct conjugation for each verb and pronoun combination.",
            },
        },
    },
    "word-drop-dash": {
        "beginner": {
            "en-es": {
                "rounds": [
                    {
                        "sentence": "Me gusta la ___",
                        "correctWord": "pizza",
                        "options": ["pizza", "libro", "agua", "música"],
                        "translation": "I like ___",
                    },
                    {
                        "sentence": "El ___ es azul",
                        "correctWord": "cielo",
                        "options": ["cielo", "casa", "perro", "coche"],
                        "translation": "The ___ is blue",
                    },
                    {
                        "sentence": "Voy a la ___",
                        "correctWord": "escuela",
                        "options": ["escuela", "playa", "tienda", "casa"],
                        "translation": "I go to ___",
                    },
                ],
                "instructions": "Complete each sentence by choosing the correct word.",
            },
        },
    },
    "audio-jumble": {
        "beginner": {
            "en-es": {
                "rounds": [
                    {"word": "hola", "scrambled": ["a", "l", "o", "h"], "translation": "hello", "audioText": "hola"},
                    {"word": "gracias", "scrambled": ["s", "a", "i", "c", "a", "r", "g"], "translation": "thank you", "audioText": "gracias"},
                    {"word": "amigo", "scrambled": ["o", "g", "i", "m", "a"], "translation": "friend", "audioText": "amigo"},
                ],
                "instructions": "Listen to the word and unscramble the letters to spell it correctly.",
            },
        },
    },
}

# Alternate spellings seen in older clients
GAME_TYPE_ALIASES: dict[str, str] = {
    "translation-match-up": "translation-matchup",
}

LANGUAGE_CODES: dict[str, str] = {
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "hindi": "hi",
    "mandarin": "zh",
    "arabic": "ar",
    "bengali": "bn",
    "portuguese": "pt",
    "russian": "ru",
    "japanese": "ja",
}
