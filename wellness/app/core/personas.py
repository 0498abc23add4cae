from enum import Enum
from typing import List

from ..models.envelope import AssistantDescriptor


class Persona(str, Enum):
    NONA = "nona"
    DUNDEE = "dundee"
    CHIARA = "chiara"
    LINA = "lina"


NAMES = {
    Persona.NONA: "Nona",
    Persona.DUNDEE: "Dundee",
    Persona.CHIARA: "Chiara",
    Persona.LINA: "Lina",
}

GREETINGS = {
    Persona.NONA: "Ciao bella! Ready to cook something delicious today?",
    Persona.DUNDEE: "Hey there! Ready to crush your workout today?",
    Persona.CHIARA: "Welcome. Let's find some peace together.",
    Persona.LINA: "Hi! Let's create a nutrition plan that works for you.",
}

FALLBACK_GREETING = "Hello! How can I help you today?"


def assistant_name(assistant_id: str) -> str:
    # Unknown ids are shown as-is
    try:
        return NAMES[Persona(assistant_id)]
    except ValueError:
        return assistant_id


def default_greeting(assistant_id: str) -> str:
    try:
        return GREETINGS[Persona(assistant_id)]
    except ValueError:
        return FALLBACK_GREETING


def describe(assistant_id: str, greeting: str | None = None) -> AssistantDescriptor:
    return AssistantDescriptor(
        id=assistant_id,
        name=assistant_name(assistant_id),
        greeting=greeting or default_greeting(assistant_id),
    )


def known_assistants() -> List[AssistantDescriptor]:
    return [describe(p.value) for p in Persona]
