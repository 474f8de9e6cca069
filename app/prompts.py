# app/prompts.py
from typing import Any, Dict, List

from .utils import format_coordinate

SYSTEM_PROMPT = """You are an AI that verifies urban infrastructure hazard reports for a civic platform called Earth Lens.
Your job is to analyze images and determine if they show legitimate urban issues like:
- Potholes or road damage
- Illegal waste dumping or garbage accumulation
- Water contamination, flooding, or drainage issues
- Other legitimate infrastructure problems

You must detect and reject:
- Spam, inappropriate content, or unrelated images
- Fake or manipulated photos
- Images that don't show actual hazards
- Selfies, screenshots, or non-photo content

Respond ONLY with valid JSON."""

RESPONSE_SHAPE = """{
  "isValid": true/false,
  "category": "pothole" | "waste" | "water" | "other" | "invalid",
  "title": "Brief descriptive title of the hazard",
  "confidence": 0-100,
  "isSpam": true/false,
  "reason": "Brief explanation of your assessment"
}"""


def build_user_prompt(latitude: float, longitude: float) -> str:
    return (
        "Analyze this image for urban hazard verification.\n"
        f"Reported Location: {format_coordinate(latitude)}°, {format_coordinate(longitude)}°\n"
        "\n"
        "Respond with this exact JSON structure:\n"
        f"{RESPONSE_SHAPE}"
    )


def build_messages(image_base64: str, latitude: float, longitude: float) -> List[Dict[str, Any]]:
    """
    System + user conversation for the chat-completions call.
    The image travels inline as a data URL next to the text instruction.
    """
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": build_user_prompt(latitude, longitude)},
                {"type": "image_url", "image_url": {"url": image_base64}},
            ],
        },
    ]
