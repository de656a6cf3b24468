import asyncio
import json
import sys

from fuku.bootstrap.bootstrapper import bootstrap_ingestion
from fuku.entities.request_part import part_kind


async def main(text: str, urls: list[str]) -> None:
    services = bootstrap_ingestion()
    attachments = [
        {"url": url, "name": url.rsplit("/", 1)[-1].split("?", 1)[0]} for url in urls
    ]
    parts = await services.part_builder.build_from_attachments(text, attachments)
    summary = [
        part["text"] if part_kind(part) == "text" else part_kind(part)
        for part in parts
    ]
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("usage: python main.py TEXT [ATTACHMENT_URL ...]")
        sys.exit(2)
    asyncio.run(main(sys.argv[1], sys.argv[2:]))
