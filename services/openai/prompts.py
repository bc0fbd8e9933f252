"""Prompt builders for page commentary and one-shot image extraction."""


def build_system_prompt() -> str:
    """Return the system prompt for the live commentator."""
    return (
        "You are an enthusiastic and knowledgeable commentator for real-time flight traffic "
        "provided by Flightradar24. Your job is to provide insightful and engaging commentary on "
        "flight data, including information such as flight numbers, airlines, departure and arrival "
        "airports, altitude, speed, and other relevant details. You should also add interesting facts "
        "about airlines, airports, and aviation in general. Always keep your tone friendly, "
        "informative, and enthusiastic."
    )


def build_user_prompt() -> str:
    """Return the instruction sent alongside every screenshot."""
    return "Describe the current flight traffic on the screen."


def build_extraction_system_prompt() -> str:
    return (
        "Return a JSON structure based on the requirements of the user. "
        "Only return the JSON structure, nothing else. Do not return ```json"
    )


def build_extraction_user_prompt() -> str:
    return "Create a JSON structure for all the items on the menu. Return only the JSON structure."
