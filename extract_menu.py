"""Print a JSON structure of every item on a photographed menu.

Sends one image to the chat-completions API with a JSON-only system prompt and
prints the parsed result. Uses the same OPENAI_API_KEY / .env setup as the
narrator.

Run: `python extract_menu.py images/menu.jpg`
"""
import argparse
import asyncio
import json
import logging

from dotenv import load_dotenv
from openai import AsyncOpenAI

from services.openai.menu_extractor import MenuExtractor

load_dotenv()


async def main(image_path: str, model: str) -> None:
    """Extract the menu structure from `image_path` and print it."""
    client = AsyncOpenAI()
    try:
        result = await MenuExtractor(client, model=model).extract(image_path)
    finally:
        await client.close()
    print(json.dumps(result, indent=2, ensure_ascii=False))


def run() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("image", help="Path to a .jpg, .jpeg, .png or .webp image")
    parser.add_argument("--model", default="gpt-4o")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main(args.image, args.model))


if __name__ == "__main__":
    run()
